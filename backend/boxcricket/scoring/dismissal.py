"""Who is out, and who gets the credit for it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import WicketType

BOWLER_CREDITED = frozenset(
    {
        WicketType.BOWLED,
        WicketType.CAUGHT,
        WicketType.CAUGHT_AND_BOWLED,
        WicketType.STUMPED,
        WicketType.HIT_WICKET,
    }
)


@dataclass(frozen=True)
class DismissalCredit:
    bowler_wicket: bool = False
    catch_by: Optional[str] = None
    run_out_by: Optional[str] = None
    stumping_by: Optional[str] = None


NO_CREDIT = DismissalCredit()


def resolve_dismissed_batsman(
    is_wicket: bool, batsman_id: str, dismissed_batsman_id: Optional[str] = None
) -> Optional[str]:
    """The striker is out unless someone else is named.

    Only a run-out can dismiss the non-striker, and it has to say so.
    """
    if not is_wicket:
        return None
    return dismissed_batsman_id or batsman_id


def dismissal_credit(
    wicket_type: Optional[WicketType],
    bowler_id: str,
    fielder_id: Optional[str] = None,
) -> DismissalCredit:
    if wicket_type is None:
        return NO_CREDIT
    bowler_wicket = wicket_type in BOWLER_CREDITED
    if wicket_type is WicketType.CAUGHT_AND_BOWLED:
        return DismissalCredit(bowler_wicket, catch_by=bowler_id)
    if wicket_type is WicketType.CAUGHT:
        return DismissalCredit(bowler_wicket, catch_by=fielder_id)
    if wicket_type is WicketType.RUN_OUT:
        return DismissalCredit(False, run_out_by=fielder_id)
    if wicket_type is WicketType.STUMPED:
        return DismissalCredit(bowler_wicket, stumping_by=fielder_id)
    return DismissalCredit(bowler_wicket)
