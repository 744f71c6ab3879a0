from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .scoring import (
    Ball,
    BallInput,
    Crease,
    InningsScore,
    InningsStatus,
    PlayerStats,
    RecordResult,
    UndoResult,
    WicketType,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RecordBallIn(_CamelModel):
    batsman_id: Optional[str] = Field(default=None, alias="batsmanId")
    non_striker_id: Optional[str] = Field(default=None, alias="nonStrikerId")
    bowler_id: Optional[str] = Field(default=None, alias="bowlerId")
    runs: int = 0
    is_wide: bool = Field(default=False, alias="isWide")
    is_no_ball: bool = Field(default=False, alias="isNoBall")
    is_wicket: bool = Field(default=False, alias="isWicket")
    wicket_type: Optional[WicketType] = Field(default=None, alias="wicketType")
    fielder_id: Optional[str] = Field(default=None, alias="fielderId")
    dismissed_batsman_id: Optional[str] = Field(
        default=None, alias="dismissedBatsmanId"
    )

    @field_validator(
        "batsman_id",
        "non_striker_id",
        "bowler_id",
        "fielder_id",
        "dismissed_batsman_id",
        "wicket_type",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def crease(self) -> Crease:
        return Crease(self.batsman_id, self.non_striker_id, self.bowler_id)

    def ball_input(self) -> BallInput:
        return BallInput(
            runs=self.runs,
            is_wide=self.is_wide,
            is_no_ball=self.is_no_ball,
            is_wicket=self.is_wicket,
            wicket_type=self.wicket_type,
            fielder_id=self.fielder_id,
            dismissed_batsman_id=self.dismissed_batsman_id,
        )

    @classmethod
    def from_input(cls, crease: Crease, ball_input: BallInput) -> "RecordBallIn":
        return cls(
            batsman_id=crease.striker_id,
            non_striker_id=crease.non_striker_id,
            bowler_id=crease.bowler_id,
            runs=ball_input.runs,
            is_wide=ball_input.is_wide,
            is_no_ball=ball_input.is_no_ball,
            is_wicket=ball_input.is_wicket,
            wicket_type=ball_input.wicket_type,
            fielder_id=ball_input.fielder_id,
            dismissed_batsman_id=ball_input.dismissed_batsman_id,
        )


class BallOut(_CamelModel):
    id: Optional[str] = None
    over_number: int = Field(alias="overNumber")
    ball_number: int = Field(alias="ballNumber")
    batsman_id: str = Field(alias="batsmanId")
    non_striker_id: str = Field(alias="nonStrikerId")
    bowler_id: str = Field(alias="bowlerId")
    runs: int = 0
    is_wide: bool = Field(default=False, alias="isWide")
    is_no_ball: bool = Field(default=False, alias="isNoBall")
    is_wicket: bool = Field(default=False, alias="isWicket")
    striker_changed: bool = Field(default=False, alias="strikerChanged")
    wicket_type: Optional[WicketType] = Field(default=None, alias="wicketType")
    fielder_id: Optional[str] = Field(default=None, alias="fielderId")
    dismissed_batsman_id: Optional[str] = Field(
        default=None, alias="dismissedBatsmanId"
    )
    label: Optional[str] = None

    @classmethod
    def from_ball(cls, ball: Ball) -> "BallOut":
        return cls(
            id=ball.id,
            over_number=ball.over_number,
            ball_number=ball.ball_number,
            batsman_id=ball.batsman_id,
            non_striker_id=ball.non_striker_id,
            bowler_id=ball.bowler_id,
            runs=ball.runs,
            is_wide=ball.is_wide,
            is_no_ball=ball.is_no_ball,
            is_wicket=ball.is_wicket,
            striker_changed=ball.striker_changed,
            wicket_type=ball.wicket_type,
            fielder_id=ball.fielder_id,
            dismissed_batsman_id=ball.dismissed_batsman_id,
            label=ball.label,
        )

    def to_ball(self) -> Ball:
        return Ball(
            id=self.id,
            over_number=self.over_number,
            ball_number=self.ball_number,
            batsman_id=self.batsman_id,
            non_striker_id=self.non_striker_id,
            bowler_id=self.bowler_id,
            runs=self.runs,
            is_wide=self.is_wide,
            is_no_ball=self.is_no_ball,
            is_wicket=self.is_wicket,
            striker_changed=self.striker_changed,
            wicket_type=self.wicket_type,
            fielder_id=self.fielder_id,
            dismissed_batsman_id=self.dismissed_batsman_id,
        )


class ScoreOut(_CamelModel):
    total_runs: int = Field(alias="totalRuns")
    wickets: int
    overs: int
    balls_in_over: int = Field(alias="ballsInOver")

    @classmethod
    def from_score(cls, score: InningsScore) -> "ScoreOut":
        return cls(
            total_runs=score.total_runs,
            wickets=score.wickets,
            overs=score.overs,
            balls_in_over=score.balls_in_over,
        )

    def to_score(self) -> InningsScore:
        return InningsScore(
            total_runs=self.total_runs,
            wickets=self.wickets,
            overs=self.overs,
            balls_in_over=self.balls_in_over,
        )


class InningsStatusOut(_CamelModel):
    can_complete_innings: bool = Field(default=False, alias="canCompleteInnings")
    is_all_out: bool = Field(default=False, alias="isAllOut")
    is_overs_complete: bool = Field(default=False, alias="isOversComplete")
    is_target_reached: bool = Field(default=False, alias="isTargetReached")

    @classmethod
    def from_status(cls, status: InningsStatus) -> "InningsStatusOut":
        return cls(
            can_complete_innings=status.can_complete_innings,
            is_all_out=status.is_all_out,
            is_overs_complete=status.is_overs_complete,
            is_target_reached=status.is_target_reached,
        )

    def to_status(self) -> InningsStatus:
        return InningsStatus(
            can_complete_innings=self.can_complete_innings,
            is_all_out=self.is_all_out,
            is_overs_complete=self.is_overs_complete,
            is_target_reached=self.is_target_reached,
        )


class RecordBallOut(InningsStatusOut):
    ball: BallOut
    updated_score: ScoreOut = Field(alias="updatedScore")

    @classmethod
    def from_result(cls, result: RecordResult) -> "RecordBallOut":
        return cls(
            ball=BallOut.from_ball(result.ball),
            updated_score=ScoreOut.from_score(result.score),
            **InningsStatusOut.from_status(result.status).model_dump(),
        )

    def to_result(self) -> RecordResult:
        return RecordResult(
            ball=self.ball.to_ball(),
            score=self.updated_score.to_score(),
            status=self.to_status(),
        )


class UndoBallOut(_CamelModel):
    remaining_balls: List[BallOut] = Field(default_factory=list, alias="remainingBalls")
    updated_score: ScoreOut = Field(alias="updatedScore")
    deleted_ball: Optional[BallOut] = Field(default=None, alias="deletedBall")

    @classmethod
    def from_result(cls, result: UndoResult) -> "UndoBallOut":
        return cls(
            remaining_balls=[BallOut.from_ball(b) for b in result.remaining_balls],
            updated_score=ScoreOut.from_score(result.score),
            deleted_ball=(
                BallOut.from_ball(result.deleted_ball) if result.deleted_ball else None
            ),
        )

    def to_result(self) -> UndoResult:
        return UndoResult(
            remaining_balls=[b.to_ball() for b in self.remaining_balls],
            score=self.updated_score.to_score(),
            deleted_ball=self.deleted_ball.to_ball() if self.deleted_ball else None,
        )


class PlayerStatsOut(_CamelModel):
    player_id: str = Field(alias="playerId")
    runs: int = 0
    balls_faced: int = Field(default=0, alias="ballsFaced")
    fours: int = 0
    sixes: int = 0
    balls_bowled: int = Field(default=0, alias="ballsBowled")
    runs_conceded: int = Field(default=0, alias="runsConceded")
    wickets: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = Field(default=0, alias="noBalls")
    catches: int = 0
    run_outs: int = Field(default=0, alias="runOuts")
    stumpings: int = 0

    @classmethod
    def from_stats(cls, player_id: str, stats: PlayerStats) -> "PlayerStatsOut":
        return cls(player_id=player_id, **stats.as_dict())


class ScorecardOut(_CamelModel):
    match_id: str = Field(alias="matchId")
    innings_id: str = Field(alias="inningsId")
    innings_number: int = Field(alias="inningsNumber")
    status: str
    score: ScoreOut
    balls: List[BallOut]
    players: List[PlayerStatsOut]
    innings_status: InningsStatusOut = Field(alias="inningsStatus")


class InningsCompletionOut(_CamelModel):
    innings_id: str = Field(alias="inningsId")
    status: str
    second_innings_started: bool = Field(default=False, alias="secondInningsStarted")
    match_completed: bool = Field(default=False, alias="matchCompleted")
    winner: Optional[str] = None
    man_of_match_id: Optional[str] = Field(default=None, alias="manOfMatchId")
