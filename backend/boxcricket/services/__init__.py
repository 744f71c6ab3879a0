"""Application services: persistence, innings status and the sync coordinator."""

from .innings_status import innings_status, max_wickets
from .man_of_match import impact_score, man_of_the_match, merge_stats
from .sync import (
    InningsProjection,
    OptimisticSyncCoordinator,
    PermanentSyncError,
    ScoringBackend,
    SyncError,
    SyncInProgressError,
    SyncOperation,
    SyncRetriesExhausted,
    SyncState,
    TransientSyncError,
)

__all__ = [
    "InningsProjection",
    "OptimisticSyncCoordinator",
    "PermanentSyncError",
    "ScoringBackend",
    "SyncError",
    "SyncInProgressError",
    "SyncOperation",
    "SyncRetriesExhausted",
    "SyncState",
    "TransientSyncError",
    "impact_score",
    "innings_status",
    "man_of_the_match",
    "max_wickets",
    "merge_stats",
]
