"""Consecutive illegal delivery (wide / no-ball) streaks and the bonus they earn.

The default ``box`` policy is a house rule: the first illegal delivery of a
streak is free, and every further consecutive one is worth one bonus run.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from .tracing import Tracer, emit

BonusRunPolicy = Callable[[int], int]


def box_bonus(new_streak: int) -> int:
    return 1 if new_streak >= 2 else 0


def classic_bonus(new_streak: int) -> int:
    return 1 if new_streak >= 1 else 0


BONUS_POLICIES: Dict[str, BonusRunPolicy] = {
    "box": box_bonus,
    "classic": classic_bonus,
}
DEFAULT_BONUS_POLICY = "box"


def get_bonus_policy(name: Optional[str] = None) -> BonusRunPolicy:
    key = (name or DEFAULT_BONUS_POLICY).strip().lower()
    try:
        return BONUS_POLICIES[key]
    except KeyError:
        raise ValueError(
            f"unknown bonus policy {name!r}; expected one of {sorted(BONUS_POLICIES)}"
        ) from None


def illegal_streak(balls: Sequence) -> int:
    """Count the illegal deliveries at the end of a chronological history."""
    streak = 0
    for ball in reversed(balls):
        if not (ball.is_wide or ball.is_no_ball):
            break
        streak += 1
    return streak


def bonus_runs(
    history: Sequence,
    is_illegal: bool,
    policy: Optional[BonusRunPolicy] = None,
    tracer: Optional[Tracer] = None,
) -> int:
    """Bonus runs owed for a new delivery appended to ``history``.

    A legal delivery breaks the streak and never earns a bonus.
    """
    policy = policy or box_bonus
    before = illegal_streak(history)
    if not is_illegal:
        emit(tracer, "illegal_streak", before=before, new_streak=0, bonus=0)
        return 0
    new_streak = before + 1
    bonus = policy(new_streak)
    emit(tracer, "illegal_streak", before=before, new_streak=new_streak, bonus=bonus)
    return bonus
