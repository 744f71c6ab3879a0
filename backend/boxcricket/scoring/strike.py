"""Strike rotation."""

from __future__ import annotations

from .overs import BALLS_PER_OVER
from .types import Ball, Crease


def should_change_strike(
    ball_number: int, runs: int, is_wide: bool, is_no_ball: bool
) -> bool:
    """Per-ball rotation: odd runs off a legal ball swap the batsmen.

    Extras never rotate strike. The last ball of an over never rotates at this
    layer either; the end-of-over swap in :func:`advance_crease` owns it, and an
    odd run on that ball cancels the swap out.
    """
    if is_wide or is_no_ball:
        return False
    if ball_number == BALLS_PER_OVER:
        return False
    return runs % 2 == 1


def advance_crease(crease: Crease, ball: Ball, over_completed: bool) -> Crease:
    """Return who takes strike for the next ball.

    A dismissed batsman's slot is left empty for the scorer to fill. When the
    over ends the bowler slot is cleared too: the same bowler is never reused
    automatically.
    """
    striker, non_striker = crease.striker_id, crease.non_striker_id
    bowler = crease.bowler_id

    if ball.is_wicket:
        dismissed = ball.dismissed_batsman_id or ball.batsman_id
        if dismissed == striker:
            striker = None
        elif dismissed == non_striker:
            non_striker = None
    elif ball.striker_changed:
        striker, non_striker = non_striker, striker

    if over_completed:
        # odd run on the final ball: batsmen crossed, then changed ends
        if ball.runs % 2 == 0:
            striker, non_striker = non_striker, striker
        bowler = None

    return Crease(striker, non_striker, bowler)


def crease_before(ball: Ball) -> Crease:
    """The crease as it stood when ``ball`` was bowled."""
    return Crease(ball.batsman_id, ball.non_striker_id, ball.bowler_id)
