"""Pure box cricket scoring engine (no I/O)."""

from .engine import evaluate_ball, evaluate_undo, last_ball_index, replay_score
from .illegal_delivery import bonus_runs, get_bonus_policy, illegal_streak
from .overs import replay_overs, update_over_progress
from .stats import replay_stats
from .strike import advance_crease, crease_before, should_change_strike
from .tracing import Tracer, log_tracer
from .types import (
    Ball,
    BallEvaluation,
    BallInput,
    Crease,
    InningsScore,
    InningsStatus,
    PlayerStats,
    RecordResult,
    UndoEvaluation,
    UndoResult,
    WicketType,
)
from .validation import ValidationError

__all__ = [
    "Ball",
    "BallEvaluation",
    "BallInput",
    "Crease",
    "InningsScore",
    "InningsStatus",
    "PlayerStats",
    "RecordResult",
    "Tracer",
    "UndoEvaluation",
    "UndoResult",
    "ValidationError",
    "WicketType",
    "advance_crease",
    "bonus_runs",
    "crease_before",
    "evaluate_ball",
    "evaluate_undo",
    "get_bonus_policy",
    "illegal_streak",
    "last_ball_index",
    "log_tracer",
    "replay_overs",
    "replay_score",
    "replay_stats",
    "should_change_strike",
    "update_over_progress",
]
