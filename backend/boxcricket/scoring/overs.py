"""Over progression: six legal deliveries make an over."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

BALLS_PER_OVER = 6


@dataclass(frozen=True)
class OverProgress:
    overs: int
    balls_in_over: int
    over_completed: bool = False


def update_over_progress(overs: int, balls_in_over: int, is_legal: bool) -> OverProgress:
    """Advance ``(overs, balls_in_over)`` by one delivery.

    Wides and no-balls leave the count untouched. Completing an over means the
    bowler has to be picked again and the batsmen change ends.
    """
    if not is_legal:
        return OverProgress(overs, balls_in_over, False)
    balls = balls_in_over + 1
    if balls >= BALLS_PER_OVER:
        return OverProgress(overs + 1, 0, True)
    return OverProgress(overs, balls, False)


def replay_overs(balls: Iterable) -> OverProgress:
    """Derive the over count of a whole log from scratch."""
    progress = OverProgress(0, 0, False)
    for ball in balls:
        progress = update_over_progress(
            progress.overs, progress.balls_in_over, ball.is_legal
        )
    return progress


def legal_balls_in_over(balls: Iterable, over_number: int) -> int:
    return sum(1 for b in balls if b.over_number == over_number and b.is_legal)
