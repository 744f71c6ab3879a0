"""Optimistic scoring with an authoritative background sync.

Every record or undo goes through the same lifecycle::

    IDLE -> LOCAL_APPLIED -> SYNCING -> RECONCILED | ROLLED_BACK

The scorer's :class:`InningsProjection` is updated synchronously by the pure
engine, so the result is visible straight away. Only after that does the
authoritative request get scheduled on the running event loop. If it succeeds,
the temporary ball id is swapped for the persisted one. If the server
scored the ball differently, its log is reloaded and everything is replayed
from it. If it fails (after bounded retries for transient errors),
the projection is restored to the snapshot taken before the operation.

One operation per innings may be in flight at a time. Issuing another one
before the first settles raises :class:`SyncInProgressError` and changes
nothing.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Union

from ..config import (
    SCORING_BONUS_POLICY,
    SYNC_BACKOFF_BASE,
    SYNC_MAX_ATTEMPTS,
    SYNC_TIMEOUT,
)
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
    advance_crease,
    crease_before,
    evaluate_ball,
    evaluate_undo,
    get_bonus_policy,
    log_tracer,
    replay_score,
    replay_stats,
)
from ..scoring.illegal_delivery import BonusRunPolicy
from ..scoring.tracing import emit

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "tmp-"


class SyncError(Exception):
    """The authoritative path failed."""


class TransientSyncError(SyncError):
    """A failure that may succeed on retry (network, timeout, 5xx)."""


class PermanentSyncError(SyncError):
    """A failure retrying cannot fix, e.g. the server rejected the ball."""

    def __init__(
        self,
        detail: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code
        self.status_code = status_code


class SyncRetriesExhausted(SyncError):
    def __init__(self, attempts: int, last_error: Optional[Exception]) -> None:
        super().__init__(f"sync failed after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class SyncInProgressError(Exception):
    """Another record/undo for this innings has not settled yet."""


class SyncState(str, enum.Enum):
    IDLE = "idle"
    LOCAL_APPLIED = "local_applied"
    SYNCING = "syncing"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


class ScoringBackend(Protocol):
    """Authoritative persistence used by the coordinator.

    Implementations must be idempotent per ``operation_id`` and report retryable
    failures as :class:`TransientSyncError`.
    """

    async def record_ball(
        self,
        match_id: str,
        innings_id: str,
        crease: Crease,
        ball_input: BallInput,
        operation_id: str,
    ) -> RecordResult: ...

    async def undo_ball(
        self,
        match_id: str,
        innings_id: str,
        ball_id: Optional[str],
        operation_id: str,
    ) -> UndoResult: ...

    async def load_balls(self, match_id: str, innings_id: str) -> List[Ball]: ...


@dataclass
class InningsProjection:
    """The scorer's local view of one innings."""

    match_id: str
    innings_id: str
    balls: List[Ball] = field(default_factory=list)
    score: InningsScore = field(default_factory=InningsScore)
    crease: Crease = field(default_factory=Crease)
    stats_by_player: Dict[str, PlayerStats] = field(default_factory=dict)
    status: InningsStatus = field(default_factory=InningsStatus)

    @classmethod
    def from_balls(
        cls,
        match_id: str,
        innings_id: str,
        balls: List[Ball],
        crease: Optional[Crease] = None,
    ) -> "InningsProjection":
        return cls(
            match_id=match_id,
            innings_id=innings_id,
            balls=list(balls),
            score=replay_score(balls),
            crease=crease or Crease(),
            stats_by_player=replay_stats(balls).stats_by_player,
        )

    def copy(self) -> "InningsProjection":
        return replace(
            self,
            balls=list(self.balls),
            stats_by_player={pid: replace(s) for pid, s in self.stats_by_player.items()},
        )


class SyncOperation:
    """Handle for one user-initiated record or undo."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.operation_id = uuid.uuid4().hex
        self.state = SyncState.IDLE
        self.temp_id: Optional[str] = None
        self.ball: Optional[Ball] = None
        self.deleted_ball: Optional[Ball] = None
        self.over_completed = False
        self.result: Optional[Union[RecordResult, UndoResult]] = None
        self.error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def done(self) -> bool:
        return self.state in (SyncState.RECONCILED, SyncState.ROLLED_BACK)

    async def wait(self) -> Union[RecordResult, UndoResult]:
        """Wait for the sync to settle; raise the error if it was rolled back."""
        if self._task is not None:
            await self._task
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise RuntimeError(f"{self.kind} {self.operation_id} has not been synced")
        return self.result

    def __repr__(self) -> str:
        return f"<SyncOperation {self.kind} {self.operation_id} {self.state.value}>"


_UNSET = object()


class OptimisticSyncCoordinator:
    def __init__(
        self,
        projection: InningsProjection,
        backend: ScoringBackend,
        *,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        timeout: Optional[float] = None,
        bonus_policy: Optional[BonusRunPolicy] = None,
        tracer: Optional[Tracer] = log_tracer,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._projection = projection
        self._backend = backend
        self._max_attempts = max(1, max_attempts or SYNC_MAX_ATTEMPTS)
        self._backoff_base = SYNC_BACKOFF_BASE if backoff_base is None else backoff_base
        self._timeout = SYNC_TIMEOUT if timeout is None else timeout
        self._bonus_policy = bonus_policy or get_bonus_policy(SCORING_BONUS_POLICY)
        self._tracer = tracer
        self._sleep = sleep
        self._in_flight: Optional[SyncOperation] = None

    @classmethod
    async def load(
        cls,
        backend: ScoringBackend,
        match_id: str,
        innings_id: str,
        crease: Optional[Crease] = None,
        **kwargs,
    ) -> "OptimisticSyncCoordinator":
        """Build a coordinator from the innings as currently persisted."""
        balls = await backend.load_balls(match_id, innings_id)
        projection = InningsProjection.from_balls(match_id, innings_id, balls, crease)
        return cls(projection, backend, **kwargs)

    @property
    def projection(self) -> InningsProjection:
        return self._projection

    @property
    def in_flight(self) -> Optional[SyncOperation]:
        return self._in_flight

    def select_players(
        self,
        *,
        striker_id=_UNSET,
        non_striker_id=_UNSET,
        bowler_id=_UNSET,
    ) -> Crease:
        """Fill crease slots, e.g. a new batsman after a wicket or a new bowler."""
        crease = self._projection.crease
        self._projection.crease = Crease(
            crease.striker_id if striker_id is _UNSET else striker_id,
            crease.non_striker_id if non_striker_id is _UNSET else non_striker_id,
            crease.bowler_id if bowler_id is _UNSET else bowler_id,
        )
        return self._projection.crease

    def record(self, ball_input: BallInput) -> SyncOperation:
        """Apply one ball locally now and persist it in the background.

        Raises :class:`~boxcricket.scoring.ValidationError` (nothing applied) if
        the crease is incomplete or the input is inconsistent.
        """
        loop = asyncio.get_running_loop()
        self._ensure_idle()
        p = self._projection
        crease = p.crease
        evaluation = evaluate_ball(
            p.balls,
            p.score,
            crease.striker_id,
            crease.non_striker_id,
            crease.bowler_id,
            ball_input,
            bonus_policy=self._bonus_policy,
            tracer=self._tracer,
        )

        snapshot = p.copy()
        op = SyncOperation("record")
        op.temp_id = f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"
        ball = replace(evaluation.ball, id=op.temp_id)
        p.balls.append(ball)
        p.score = evaluation.score
        p.stats_by_player = evaluation.stats_by_player
        p.crease = advance_crease(crease, ball, evaluation.over_completed)
        op.ball = ball
        op.over_completed = evaluation.over_completed
        op.state = SyncState.LOCAL_APPLIED
        emit(self._tracer, "sync_local_applied", kind=op.kind, ball=ball.label, temp_id=op.temp_id)

        def call() -> Awaitable[RecordResult]:
            return self._backend.record_ball(
                p.match_id, p.innings_id, crease, ball_input, op.operation_id
            )

        self._dispatch(loop, op, snapshot, call, self._reconcile_record)
        return op

    def undo(self) -> SyncOperation:
        """Remove the last ball locally now and persist the removal.

        Undoing an empty innings is a no-op: the returned operation is already
        reconciled, with no deleted ball, and nothing is sent.
        """
        loop = asyncio.get_running_loop()
        self._ensure_idle()
        p = self._projection
        evaluation = evaluate_undo(p.balls, p.score, tracer=self._tracer)
        op = SyncOperation("undo")
        deleted = evaluation.deleted_ball
        if deleted is None:
            op.state = SyncState.RECONCILED
            op.result = UndoResult(remaining_balls=list(p.balls), score=p.score)
            return op

        snapshot = p.copy()
        p.balls = list(evaluation.remaining_balls)
        p.score = evaluation.score
        p.stats_by_player = evaluation.stats_by_player
        p.crease = crease_before(deleted)
        op.deleted_ball = deleted
        op.over_completed = evaluation.score.overs < snapshot.score.overs
        op.state = SyncState.LOCAL_APPLIED
        emit(self._tracer, "sync_local_applied", kind=op.kind, ball=deleted.label)

        def call() -> Awaitable[UndoResult]:
            return self._backend.undo_ball(
                p.match_id, p.innings_id, deleted.id, op.operation_id
            )

        self._dispatch(loop, op, snapshot, call, self._reconcile_undo)
        return op

    async def drain(self) -> None:
        """Wait until no operation is in flight."""
        op = self._in_flight
        if op is not None and op._task is not None:
            await op._task

    def _ensure_idle(self) -> None:
        if self._in_flight is not None:
            raise SyncInProgressError(
                f"{self._in_flight.kind} {self._in_flight.operation_id} is still syncing"
            )

    def _dispatch(self, loop, op, snapshot, call, reconcile) -> None:
        self._in_flight = op
        op._task = loop.create_task(self._run(op, snapshot, call, reconcile))

    async def _run(self, op, snapshot, call, reconcile) -> None:
        op.state = SyncState.SYNCING
        try:
            result = await self._call_with_retry(op, call)
        except SyncError as exc:
            self._rollback(op, snapshot, exc)
        except asyncio.CancelledError as exc:
            self._rollback(op, snapshot, exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected error syncing %s %s", op.kind, op.operation_id)
            self._rollback(op, snapshot, exc)
        else:
            await reconcile(op, result)
        finally:
            self._in_flight = None

    async def _call_with_retry(self, op: SyncOperation, call):
        last_error: Optional[Exception] = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await asyncio.wait_for(call(), self._timeout or None)
            except asyncio.TimeoutError:
                last_error = TransientSyncError(f"timed out after {self._timeout}s")
            except TransientSyncError as exc:
                last_error = exc
            if attempt < self._max_attempts:
                delay = self._backoff_base * 2 ** (attempt - 1)
                logger.warning(
                    "Sync of %s %s failed (attempt %d/%d): %s; retrying in %.2fs",
                    op.kind,
                    op.operation_id,
                    attempt,
                    self._max_attempts,
                    last_error,
                    delay,
                )
                await self._sleep(delay)
        raise SyncRetriesExhausted(self._max_attempts, last_error) from last_error

    async def _reconcile_record(self, op: SyncOperation, result: RecordResult) -> None:
        p = self._projection
        local, persisted = op.ball, result.ball
        p.balls = [persisted if b.id == op.temp_id else b for b in p.balls]
        ball_diverged = replace(local, id=None) != replace(persisted, id=None)
        if ball_diverged or p.score != result.score:
            # the local log no longer matches the server's; take the server's
            # log so the score stays a replay of the balls it holds
            logger.warning(
                "Local %s (score %s) diverged from persisted %s (score %s); "
                "reloading innings %s",
                local,
                p.score,
                persisted,
                result.score,
                p.innings_id,
            )
            try:
                p.balls = list(
                    await self._call_with_retry(
                        op, lambda: self._backend.load_balls(p.match_id, p.innings_id)
                    )
                )
            except SyncError as exc:
                # the ball is persisted either way; keep the local log consistent
                logger.error(
                    "Could not reload innings %s after divergence: %s", p.innings_id, exc
                )
        p.score = replay_score(p.balls)
        p.stats_by_player = replay_stats(p.balls).stats_by_player
        p.status = result.status
        op.ball = persisted
        op.result = result
        op.state = SyncState.RECONCILED
        emit(
            self._tracer,
            "sync_reconciled",
            kind=op.kind,
            temp_id=op.temp_id,
            ball_id=persisted.id,
        )

    async def _reconcile_undo(self, op: SyncOperation, result: UndoResult) -> None:
        p = self._projection
        if p.score != result.score:
            logger.warning(
                "Local score %s diverged from persisted %s; keeping persisted",
                p.score,
                result.score,
            )
        p.balls = list(result.remaining_balls)
        p.score = result.score
        p.stats_by_player = replay_stats(p.balls).stats_by_player
        op.result = result
        op.state = SyncState.RECONCILED
        emit(self._tracer, "sync_reconciled", kind=op.kind, ball_id=op.deleted_ball.id)

    def _rollback(
        self, op: SyncOperation, snapshot: InningsProjection, exc: BaseException
    ) -> None:
        for f in fields(snapshot):
            setattr(self._projection, f.name, getattr(snapshot, f.name))
        op.error = exc
        op.state = SyncState.ROLLED_BACK
        logger.error("Rolled back %s %s: %s", op.kind, op.operation_id, exc)
        emit(self._tracer, "sync_rolled_back", kind=op.kind, error=str(exc))
