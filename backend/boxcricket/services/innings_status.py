from __future__ import annotations

from typing import Optional

from ..scoring.types import InningsScore, InningsStatus


def max_wickets(batting_side_size: int) -> int:
    """All out once every batsman but one has been dismissed."""
    return max(0, batting_side_size - 1)


def innings_status(
    score: InningsScore,
    *,
    total_overs: int,
    batting_side_size: int,
    innings_number: int = 1,
    first_innings_total: Optional[int] = None,
    completed: bool = False,
) -> InningsStatus:
    """Work out whether the innings may now be completed.

    The scorer still has to confirm completion; this only reports that one of
    the end conditions (all out, overs bowled, target reached) has been met.
    ``first_innings_total`` is ignored outside the second innings.
    """
    is_all_out = score.wickets >= max_wickets(batting_side_size)
    is_overs_complete = score.overs >= total_overs
    is_target_reached = (
        innings_number == 2
        and first_innings_total is not None
        and score.total_runs >= first_innings_total + 1
    )
    can_complete = (is_all_out or is_overs_complete or is_target_reached) and not completed
    return InningsStatus(
        can_complete_innings=can_complete,
        is_all_out=is_all_out,
        is_overs_complete=is_overs_complete,
        is_target_reached=is_target_reached,
    )
