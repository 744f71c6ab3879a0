"""Authoritative backends for :class:`~.sync.OptimisticSyncCoordinator`."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..config import API_PREFIX
from ..db import get_session_factory
from ..exceptions import DomainException
from ..scoring import (
    Ball,
    BallInput,
    Crease,
    RecordResult,
    UndoResult,
    ValidationError,
)
from ..schemas import RecordBallIn, RecordBallOut, ScorecardOut, UndoBallOut
from . import scoring
from .sync import PermanentSyncError, TransientSyncError

logger = logging.getLogger(__name__)

# request timeouts and rate limiting are worth another attempt
RETRYABLE_STATUS = {408, 429}


class SessionScoringBackend:
    """Persist through the storage adapter in this process."""

    def __init__(self, session_factory=None, *, bonus_policy=None) -> None:
        self._session_factory = session_factory
        self._bonus_policy = bonus_policy

    def _session(self):
        factory = self._session_factory or get_session_factory()
        return factory()

    async def _call(self, fn, *args, **kwargs):
        try:
            async with self._session() as session:
                return await fn(session, *args, **kwargs)
        except ValidationError as exc:
            raise PermanentSyncError(exc.detail, code="ball_invalid", status_code=400) from exc
        except DomainException as exc:
            raise PermanentSyncError(
                exc.detail or exc.title, code=exc.code, status_code=exc.status_code
            ) from exc
        except OperationalError as exc:
            raise TransientSyncError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise PermanentSyncError(str(exc)) from exc

    async def record_ball(
        self,
        match_id: str,
        innings_id: str,
        crease: Crease,
        ball_input: BallInput,
        operation_id: str,
    ) -> RecordResult:
        return await self._call(
            scoring.record_ball,
            match_id,
            innings_id,
            crease,
            ball_input,
            operation_id=operation_id,
            bonus_policy=self._bonus_policy,
        )

    async def undo_ball(
        self,
        match_id: str,
        innings_id: str,
        ball_id: Optional[str],
        operation_id: str,
    ) -> UndoResult:
        return await self._call(
            scoring.undo_last_ball, match_id, innings_id, ball_id=ball_id
        )

    async def load_balls(self, match_id: str, innings_id: str) -> List[Ball]:
        card = await self._call(scoring.get_scorecard, match_id, innings_id)
        return card.balls


class HttpScoringBackend:
    """Persist through the HTTP API with a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, *, prefix: str = f"{API_PREFIX}/v0") -> None:
        self._client = client
        self._prefix = prefix.rstrip("/")

    def _innings_url(self, match_id: str, innings_id: str) -> str:
        return f"{self._prefix}/matches/{match_id}/innings/{innings_id}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransientSyncError(f"{method} {url} timed out") from exc
        except httpx.TransportError as exc:
            raise TransientSyncError(f"{method} {url} failed: {exc}") from exc

        if resp.status_code >= 500 or resp.status_code in RETRYABLE_STATUS:
            raise TransientSyncError(f"{method} {url} returned {resp.status_code}")
        if resp.status_code >= 400:
            detail, code = _problem(resp)
            logger.info("%s %s rejected (%s): %s", method, url, resp.status_code, detail)
            raise PermanentSyncError(detail, code=code, status_code=resp.status_code)
        return resp

    async def record_ball(
        self,
        match_id: str,
        innings_id: str,
        crease: Crease,
        ball_input: BallInput,
        operation_id: str,
    ) -> RecordResult:
        body = RecordBallIn.from_input(crease, ball_input)
        resp = await self._request(
            "POST",
            f"{self._innings_url(match_id, innings_id)}/balls",
            json=body.model_dump(mode="json", by_alias=True),
            headers={"Idempotency-Key": operation_id},
        )
        return RecordBallOut.model_validate(resp.json()).to_result()

    async def undo_ball(
        self,
        match_id: str,
        innings_id: str,
        ball_id: Optional[str],
        operation_id: str,
    ) -> UndoResult:
        params = {"ballId": ball_id} if ball_id else None
        resp = await self._request(
            "DELETE",
            f"{self._innings_url(match_id, innings_id)}/balls/last",
            params=params,
        )
        return UndoBallOut.model_validate(resp.json()).to_result()

    async def load_balls(self, match_id: str, innings_id: str) -> List[Ball]:
        resp = await self._request(
            "GET", f"{self._innings_url(match_id, innings_id)}/scorecard"
        )
        card = ScorecardOut.model_validate(resp.json())
        return [b.to_ball() for b in card.balls]


def _problem(resp: httpx.Response) -> tuple[str, Optional[str]]:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}", None
    if not isinstance(body, dict):
        return str(body), None
    detail = body.get("detail") or body.get("title") or f"HTTP {resp.status_code}"
    return str(detail), body.get("code")
