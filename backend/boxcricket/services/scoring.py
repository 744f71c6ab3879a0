"""Authoritative record/undo against the database.

The ball log in ``ball_event`` is the source of truth. The score columns on
``innings`` and the ``player_match_stats`` rows are caches rewritten from a
full replay after every change; nothing here reads them back as input.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import SCORING_BONUS_POLICY
from ..exceptions import BallNotLast, InningsCompleted, InningsNotFound, MatchNotFound
from ..models import BallEvent, Innings, Match, MatchPlayer, PlayerMatchStats
from ..scoring import (
    Ball,
    BallInput,
    Crease,
    InningsScore,
    InningsStatus,
    PlayerStats,
    RecordResult,
    Tracer,
    UndoResult,
    WicketType,
    evaluate_ball,
    evaluate_undo,
    get_bonus_policy,
    replay_score,
    replay_stats,
)
from ..scoring.illegal_delivery import BonusRunPolicy
from .innings_status import innings_status
from .man_of_match import man_of_the_match, merge_stats

logger = logging.getLogger(__name__)

IN_PROGRESS = "IN_PROGRESS"
COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class Scorecard:
    match_id: str
    innings_id: str
    innings_number: int
    status: str
    score: InningsScore
    balls: List[Ball]
    stats_by_player: Dict[str, PlayerStats]
    innings_status: InningsStatus


def ball_from_row(row: BallEvent) -> Ball:
    return Ball(
        id=row.id,
        over_number=row.over_number,
        ball_number=row.ball_number,
        batsman_id=row.batsman_id,
        non_striker_id=row.non_striker_id,
        bowler_id=row.bowler_id,
        runs=row.runs,
        is_wide=row.is_wide,
        is_no_ball=row.is_no_ball,
        is_wicket=row.is_wicket,
        striker_changed=row.striker_changed,
        wicket_type=WicketType(row.wicket_type) if row.wicket_type else None,
        fielder_id=row.fielder_id,
        dismissed_batsman_id=row.dismissed_batsman_id,
    )


def _row_from_ball(
    ball: Ball, *, innings_id: str, sequence: int, operation_id: Optional[str]
) -> BallEvent:
    return BallEvent(
        id=uuid.uuid4().hex,
        innings_id=innings_id,
        sequence=sequence,
        operation_id=operation_id,
        over_number=ball.over_number,
        ball_number=ball.ball_number,
        batsman_id=ball.batsman_id,
        non_striker_id=ball.non_striker_id,
        bowler_id=ball.bowler_id,
        runs=ball.runs,
        is_wide=ball.is_wide,
        is_no_ball=ball.is_no_ball,
        is_wicket=ball.is_wicket,
        striker_changed=ball.striker_changed,
        wicket_type=ball.wicket_type.value if ball.wicket_type else None,
        fielder_id=ball.fielder_id,
        dismissed_batsman_id=ball.dismissed_batsman_id,
    )


async def get_match_innings(
    session: AsyncSession, match_id: str, innings_id: str
) -> Tuple[Match, Innings]:
    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    innings = await session.get(Innings, innings_id)
    if innings is None or innings.match_id != match_id:
        raise InningsNotFound(innings_id)
    return match, innings


async def load_ball_rows(session: AsyncSession, innings_id: str) -> List[BallEvent]:
    """Ball rows of an innings in insertion order."""
    return list(
        (
            await session.execute(
                select(BallEvent)
                .where(BallEvent.innings_id == innings_id)
                .order_by(BallEvent.sequence)
            )
        ).scalars().all()
    )


async def _batting_side_size(session: AsyncSession, match_id: str, team: str) -> int:
    return (
        await session.execute(
            select(func.count(MatchPlayer.id)).where(
                MatchPlayer.match_id == match_id,
                or_(MatchPlayer.team == team, MatchPlayer.is_dual_player.is_(True)),
            )
        )
    ).scalar_one()


async def _first_innings_total(session: AsyncSession, match_id: str) -> Optional[int]:
    first = (
        await session.execute(
            select(Innings).where(Innings.match_id == match_id, Innings.innings_number == 1)
        )
    ).scalars().first()
    if first is None:
        return None
    balls = [ball_from_row(r) for r in await load_ball_rows(session, first.id)]
    return replay_score(balls).total_runs


async def _status_for(
    session: AsyncSession, match: Match, innings: Innings, score: InningsScore
) -> InningsStatus:
    first_total = None
    if innings.innings_number == 2:
        first_total = await _first_innings_total(session, match.id)
    return innings_status(
        score,
        total_overs=match.total_overs,
        batting_side_size=await _batting_side_size(session, match.id, innings.batting_team),
        innings_number=innings.innings_number,
        first_innings_total=first_total,
        completed=innings.status == COMPLETED,
    )


def _cache_score(innings: Innings, score: InningsScore) -> None:
    innings.total_runs = score.total_runs
    innings.wickets = score.wickets
    innings.overs = score.overs
    innings.balls_in_over = score.balls_in_over


async def _rewrite_player_stats(
    session: AsyncSession,
    match_id: str,
    innings_id: str,
    stats_by_player: Dict[str, PlayerStats],
) -> None:
    await session.execute(
        delete(PlayerMatchStats).where(
            PlayerMatchStats.match_id == match_id,
            PlayerMatchStats.innings_id == innings_id,
        )
    )
    for player_id, stats in sorted(stats_by_player.items()):
        session.add(
            PlayerMatchStats(
                id=uuid.uuid4().hex,
                match_id=match_id,
                innings_id=innings_id,
                player_id=player_id,
                **stats.as_dict(),
            )
        )


async def record_ball(
    session: AsyncSession,
    match_id: str,
    innings_id: str,
    crease: Crease,
    ball_input: BallInput,
    *,
    operation_id: Optional[str] = None,
    bonus_policy: Optional[BonusRunPolicy] = None,
    tracer: Optional[Tracer] = None,
) -> RecordResult:
    """Evaluate one ball against the persisted log and append it.

    Repeating a call with the same ``operation_id`` returns the ball stored by
    the first call instead of recording it twice.
    """
    match, innings = await get_match_innings(session, match_id, innings_id)
    rows = await load_ball_rows(session, innings_id)
    balls = [ball_from_row(r) for r in rows]

    if operation_id:
        for row in rows:
            if row.operation_id == operation_id:
                logger.info(
                    "Ball for operation %s already recorded as %s", operation_id, row.id
                )
                score = replay_score(balls)
                status = await _status_for(session, match, innings, score)
                return RecordResult(ball=ball_from_row(row), score=score, status=status)

    if innings.status == COMPLETED:
        raise InningsCompleted(innings_id)

    policy = bonus_policy or get_bonus_policy(SCORING_BONUS_POLICY)
    evaluation = evaluate_ball(
        balls,
        replay_score(balls),
        crease.striker_id,
        crease.non_striker_id,
        crease.bowler_id,
        ball_input,
        bonus_policy=policy,
        tracer=tracer,
    )

    row = _row_from_ball(
        evaluation.ball,
        innings_id=innings_id,
        sequence=rows[-1].sequence + 1 if rows else 1,
        operation_id=operation_id,
    )
    session.add(row)
    _cache_score(innings, evaluation.score)
    await _rewrite_player_stats(session, match_id, innings_id, evaluation.stats_by_player)
    await session.commit()

    ball = replace(evaluation.ball, id=row.id)
    logger.info(
        "Recorded ball %s in innings %s (%s/%s)",
        ball.label,
        innings_id,
        evaluation.score.total_runs,
        evaluation.score.wickets,
    )
    status = await _status_for(session, match, innings, evaluation.score)
    return RecordResult(ball=ball, score=evaluation.score, status=status)


async def undo_last_ball(
    session: AsyncSession,
    match_id: str,
    innings_id: str,
    *,
    ball_id: Optional[str] = None,
    tracer: Optional[Tracer] = None,
) -> UndoResult:
    """Delete the last ball of the innings and re-derive everything.

    When ``ball_id`` is given the call only ever deletes that ball: if it is
    already gone the call is a no-op, and if a later ball exists it fails with
    :class:`BallNotLast`.
    """
    _, innings = await get_match_innings(session, match_id, innings_id)
    rows = await load_ball_rows(session, innings_id)
    balls = [ball_from_row(r) for r in rows]
    current = replay_score(balls)

    if ball_id is not None and all(r.id != ball_id for r in rows):
        logger.info("Ball %s already removed from innings %s", ball_id, innings_id)
        return UndoResult(remaining_balls=balls, score=current, deleted_ball=None)
    if innings.status == COMPLETED:
        raise InningsCompleted(innings_id)

    evaluation = evaluate_undo(balls, current, tracer=tracer)
    deleted = evaluation.deleted_ball
    if deleted is None:
        return UndoResult(remaining_balls=[], score=current, deleted_ball=None)
    if ball_id is not None and deleted.id != ball_id:
        raise BallNotLast(ball_id)

    row = next(r for r in rows if r.id == deleted.id)
    await session.delete(row)
    _cache_score(innings, evaluation.score)
    await _rewrite_player_stats(session, match_id, innings_id, evaluation.stats_by_player)
    await session.commit()

    logger.info("Undid ball %s in innings %s", deleted.label, innings_id)
    return UndoResult(
        remaining_balls=evaluation.remaining_balls,
        score=evaluation.score,
        deleted_ball=deleted,
    )


@dataclass(frozen=True)
class InningsCompletion:
    innings_id: str
    status: str
    second_innings_started: bool = False
    match_completed: bool = False
    winner: Optional[str] = None
    man_of_match_id: Optional[str] = None


async def complete_innings(
    session: AsyncSession, match_id: str, innings_id: str
) -> InningsCompletion:
    """Close an innings once the scorer confirms it.

    Closing the first innings opens the second; closing the second decides the
    match on runs (``winner`` stays ``None`` on a tie) and names the man of the
    match from both innings' stats.
    """
    match, innings = await get_match_innings(session, match_id, innings_id)
    if innings.status == COMPLETED:
        raise InningsCompleted(innings_id)
    innings.status = COMPLETED

    others = (
        await session.execute(
            select(Innings).where(Innings.match_id == match_id, Innings.id != innings_id)
        )
    ).scalars().all()
    second_started = False
    match_completed = False
    if innings.innings_number == 1:
        for other in others:
            if other.innings_number == 2:
                other.status = IN_PROGRESS
                second_started = True
    elif innings.innings_number == 2:
        first = next((o for o in others if o.innings_number == 1), None)
        if first is not None:
            second_replay = replay_stats(
                [ball_from_row(r) for r in await load_ball_rows(session, innings_id)]
            )
            first_replay = replay_stats(
                [ball_from_row(r) for r in await load_ball_rows(session, first.id)]
            )
            second_total, first_total = second_replay.total_runs, first_replay.total_runs
            if second_total > first_total:
                match.winner = innings.batting_team
            elif second_total < first_total:
                match.winner = first.batting_team
            else:
                match.winner = None
            match.man_of_match_id = man_of_the_match(
                merge_stats([first_replay.stats_by_player, second_replay.stats_by_player])
            )
            match.status = COMPLETED
            match_completed = True
    await session.commit()

    logger.info(
        "Completed innings %s of match %s%s",
        innings_id,
        match_id,
        f" (winner={match.winner}, man of the match={match.man_of_match_id})"
        if match_completed
        else "",
    )
    return InningsCompletion(
        innings_id=innings_id,
        status=innings.status,
        second_innings_started=second_started,
        match_completed=match_completed,
        winner=match.winner if match_completed else None,
        man_of_match_id=match.man_of_match_id if match_completed else None,
    )


async def get_scorecard(
    session: AsyncSession, match_id: str, innings_id: str
) -> Scorecard:
    match, innings = await get_match_innings(session, match_id, innings_id)
    balls = [ball_from_row(r) for r in await load_ball_rows(session, innings_id)]
    score = replay_score(balls)
    return Scorecard(
        match_id=match_id,
        innings_id=innings_id,
        innings_number=innings.innings_number,
        status=innings.status,
        score=score,
        balls=balls,
        stats_by_player=replay_stats(balls).stats_by_player,
        innings_status=await _status_for(session, match, innings, score),
    )
