"""Plain value types shared by the scoring engine and its adapters."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional


class WicketType(str, enum.Enum):
    BOWLED = "BOWLED"
    CAUGHT = "CAUGHT"
    CAUGHT_AND_BOWLED = "CAUGHT_AND_BOWLED"
    RUN_OUT = "RUN_OUT"
    STUMPED = "STUMPED"
    LBW = "LBW"
    HIT_WICKET = "HIT_WICKET"
    RETIRED = "RETIRED"
    OTHER = "OTHER"


@dataclass(frozen=True)
class BallInput:
    """Raw scorer input for one delivery."""

    runs: int = 0
    is_wide: bool = False
    is_no_ball: bool = False
    is_wicket: bool = False
    wicket_type: Optional[WicketType] = None
    fielder_id: Optional[str] = None
    dismissed_batsman_id: Optional[str] = None

    @property
    def is_legal(self) -> bool:
        return not (self.is_wide or self.is_no_ball)


@dataclass(frozen=True)
class Ball:
    """A recorded delivery. ``runs`` already includes any streak bonus."""

    over_number: int
    ball_number: int
    batsman_id: str
    non_striker_id: str
    bowler_id: str
    runs: int = 0
    is_wide: bool = False
    is_no_ball: bool = False
    is_wicket: bool = False
    striker_changed: bool = False
    wicket_type: Optional[WicketType] = None
    fielder_id: Optional[str] = None
    dismissed_batsman_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_legal(self) -> bool:
        return not (self.is_wide or self.is_no_ball)

    @property
    def label(self) -> str:
        """Short form used in traces, e.g. ``0.3(4)`` or ``1.2(W)``."""
        if self.is_wide:
            mark = "Wd"
        elif self.is_no_ball:
            mark = "Nb"
        elif self.is_wicket:
            mark = "W"
        else:
            mark = str(self.runs)
        return f"{self.over_number}.{self.ball_number}({mark})"


@dataclass(frozen=True)
class InningsScore:
    total_runs: int = 0
    wickets: int = 0
    overs: int = 0
    balls_in_over: int = 0


@dataclass
class PlayerStats:
    # batting
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    # bowling
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0
    # fielding
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Crease:
    """Who is on strike, at the other end and bowling.

    A ``None`` slot must be filled by the scorer before the next ball.
    """

    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None


@dataclass(frozen=True)
class StatsReplay:
    total_runs: int
    wickets: int
    stats_by_player: Dict[str, PlayerStats]


@dataclass(frozen=True)
class BallEvaluation:
    ball: Ball
    score: InningsScore
    over_completed: bool
    striker_changed: bool
    stats_by_player: Dict[str, PlayerStats]


@dataclass(frozen=True)
class UndoEvaluation:
    remaining_balls: List[Ball]
    score: InningsScore
    deleted_ball: Optional[Ball]
    stats_by_player: Dict[str, PlayerStats]


@dataclass(frozen=True)
class InningsStatus:
    can_complete_innings: bool = False
    is_all_out: bool = False
    is_overs_complete: bool = False
    is_target_reached: bool = False


@dataclass(frozen=True)
class RecordResult:
    """Authoritative outcome of recording one ball."""

    ball: Ball
    score: InningsScore
    status: InningsStatus = field(default_factory=InningsStatus)


@dataclass(frozen=True)
class UndoResult:
    """Authoritative outcome of undoing the last ball."""

    remaining_balls: List[Ball]
    score: InningsScore
    deleted_ball: Optional[Ball] = None
