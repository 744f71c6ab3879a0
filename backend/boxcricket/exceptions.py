from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class InningsNotFound(DomainException):
    def __init__(self, innings_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Innings not found",
            detail=f"innings '{innings_id}' not found",
            code="innings_not_found",
        )


class InningsCompleted(DomainException):
    def __init__(self, innings_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Innings completed",
            detail=f"innings '{innings_id}' is already completed",
            code="innings_completed",
        )


class InvalidBall(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=400,
            title="Invalid ball",
            detail=detail,
            code="ball_invalid",
        )


class BallNotLast(DomainException):
    def __init__(self, ball_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Ball is not the last ball",
            detail=f"ball '{ball_id}' is not the last ball of the innings",
            code="ball_not_last",
        )

