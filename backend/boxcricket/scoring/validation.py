from typing import Optional

from .types import BallInput, WicketType


class ValidationError(Exception):
    """Raised when a delivery cannot be evaluated."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_crease(
    batsman_id: Optional[str],
    non_striker_id: Optional[str],
    bowler_id: Optional[str],
) -> None:
    """Ensure all three players needed to bowl a ball have been selected.

    Rules:
    - Striker, non-striker and bowler are required
    - Striker and non-striker must be different players
    """

    missing = [
        name
        for name, value in (
            ("batsmanId", batsman_id),
            ("nonStrikerId", non_striker_id),
            ("bowlerId", bowler_id),
        )
        if not value
    ]
    if missing:
        raise ValidationError(
            "batsmanId, nonStrikerId and bowlerId are required "
            f"(missing: {', '.join(missing)})."
        )
    if batsman_id == non_striker_id:
        raise ValidationError("Striker and non-striker must be different players.")


def validate_ball_input(
    ball_input: BallInput,
    batsman_id: str,
    non_striker_id: str,
) -> None:
    """Validate the raw scorer input for one delivery.

    Rules:
    - ``runs`` must be an integer >= 0 (booleans are rejected)
    - A delivery cannot be both a wide and a no-ball
    - ``wicketType``, ``fielderId`` and ``dismissedBatsmanId`` require ``isWicket``
    - The dismissed batsman must be one of the two batsmen at the crease
    """

    runs = ball_input.runs
    if isinstance(runs, bool) or not isinstance(runs, int):
        raise ValidationError("runs must be an integer.")
    if runs < 0:
        raise ValidationError("runs must be >= 0.")

    if ball_input.is_wide and ball_input.is_no_ball:
        raise ValidationError("A delivery cannot be both a wide and a no-ball.")

    if not ball_input.is_wicket:
        if ball_input.wicket_type is not None:
            raise ValidationError("wicketType requires isWicket.")
        if ball_input.dismissed_batsman_id:
            raise ValidationError("dismissedBatsmanId requires isWicket.")
        if ball_input.fielder_id:
            raise ValidationError("fielderId requires isWicket.")
        return

    if ball_input.wicket_type is not None and not isinstance(
        ball_input.wicket_type, WicketType
    ):
        raise ValidationError(f"Unknown wicketType {ball_input.wicket_type!r}.")

    dismissed = ball_input.dismissed_batsman_id
    if dismissed and dismissed not in (batsman_id, non_striker_id):
        raise ValidationError(
            "dismissedBatsmanId must be the striker or the non-striker."
        )
