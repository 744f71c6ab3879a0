"""Box cricket scoring engine.

Turns one ball of scorer input into a fully resolved :class:`Ball` and
re-derives the innings from its log. The same functions run speculatively on a
scorer's local projection and authoritatively before persisting, so the two
paths cannot disagree about the rules.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .dismissal import resolve_dismissed_batsman
from .illegal_delivery import BonusRunPolicy, bonus_runs
from .overs import legal_balls_in_over, replay_overs, update_over_progress
from .stats import replay_stats
from .strike import should_change_strike
from .tracing import Tracer, emit
from .types import (
    Ball,
    BallEvaluation,
    BallInput,
    InningsScore,
    UndoEvaluation,
)
from .validation import validate_ball_input, validate_crease


def evaluate_ball(
    existing: Sequence[Ball],
    score: InningsScore,
    batsman_id: Optional[str],
    non_striker_id: Optional[str],
    bowler_id: Optional[str],
    ball_input: BallInput,
    *,
    bonus_policy: Optional[BonusRunPolicy] = None,
    tracer: Optional[Tracer] = None,
) -> BallEvaluation:
    """Evaluate one delivery against the innings so far.

    ``existing`` must be in insertion order. Raises
    :class:`~boxcricket.scoring.validation.ValidationError` before doing any
    work when the crease is incomplete or the input is inconsistent.
    """
    validate_crease(batsman_id, non_striker_id, bowler_id)
    validate_ball_input(ball_input, batsman_id, non_striker_id)

    is_legal = ball_input.is_legal
    over_number = score.overs
    legal_so_far = legal_balls_in_over(existing, over_number)
    # an illegal delivery shares the pending ball number
    ball_number = legal_so_far + 1 if is_legal else legal_so_far

    bonus = bonus_runs(existing, not is_legal, bonus_policy, tracer)
    striker_changed = should_change_strike(
        ball_number, ball_input.runs, ball_input.is_wide, ball_input.is_no_ball
    )
    dismissed = resolve_dismissed_batsman(
        ball_input.is_wicket, batsman_id, ball_input.dismissed_batsman_id
    )

    ball = Ball(
        over_number=over_number,
        ball_number=ball_number,
        batsman_id=batsman_id,
        non_striker_id=non_striker_id,
        bowler_id=bowler_id,
        runs=ball_input.runs + bonus,
        is_wide=ball_input.is_wide,
        is_no_ball=ball_input.is_no_ball,
        is_wicket=ball_input.is_wicket,
        striker_changed=striker_changed,
        wicket_type=ball_input.wicket_type if ball_input.is_wicket else None,
        fielder_id=ball_input.fielder_id if ball_input.is_wicket else None,
        dismissed_batsman_id=dismissed,
    )

    replay = replay_stats([*existing, ball], tracer)
    progress = update_over_progress(score.overs, score.balls_in_over, is_legal)
    new_score = InningsScore(
        total_runs=replay.total_runs,
        wickets=replay.wickets,
        overs=progress.overs,
        balls_in_over=progress.balls_in_over,
    )

    emit(
        tracer,
        "ball_evaluated",
        ball=ball.label,
        bonus=bonus,
        striker_changed=striker_changed,
        over_completed=progress.over_completed,
        total_runs=new_score.total_runs,
    )
    return BallEvaluation(
        ball=ball,
        score=new_score,
        over_completed=progress.over_completed,
        striker_changed=striker_changed,
        stats_by_player=replay.stats_by_player,
    )


def last_ball_index(balls: Sequence[Ball]) -> Optional[int]:
    """Index of the ball an undo removes.

    Highest ``(over_number, ball_number)`` wins; wides and no-balls share a
    ball number with their neighbours, so ties go to the latest insertion.
    """
    if not balls:
        return None
    return max(
        range(len(balls)),
        key=lambda i: (balls[i].over_number, balls[i].ball_number, i),
    )


def replay_score(balls: Sequence[Ball], tracer: Optional[Tracer] = None) -> InningsScore:
    replay = replay_stats(balls, tracer)
    progress = replay_overs(balls)
    return InningsScore(
        total_runs=replay.total_runs,
        wickets=replay.wickets,
        overs=progress.overs,
        balls_in_over=progress.balls_in_over,
    )


def evaluate_undo(
    existing: Sequence[Ball],
    score: InningsScore,
    *,
    tracer: Optional[Tracer] = None,
) -> UndoEvaluation:
    """Remove the last ball and re-derive the innings from what is left.

    Undoing an empty innings is a no-op, not an error.
    """
    index = last_ball_index(existing)
    if index is None:
        emit(tracer, "undo_noop")
        return UndoEvaluation(
            remaining_balls=[],
            score=score,
            deleted_ball=None,
            stats_by_player={},
        )

    deleted = existing[index]
    remaining: List[Ball] = [b for i, b in enumerate(existing) if i != index]
    replay = replay_stats(remaining, tracer)
    progress = replay_overs(remaining)
    new_score = InningsScore(
        total_runs=replay.total_runs,
        wickets=replay.wickets,
        overs=progress.overs,
        balls_in_over=progress.balls_in_over,
    )
    emit(tracer, "ball_undone", ball=deleted.label, total_runs=new_score.total_runs)
    return UndoEvaluation(
        remaining_balls=remaining,
        score=new_score,
        deleted_ball=deleted,
        stats_by_player=replay.stats_by_player,
    )
