from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Boolean,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    total_overs = Column(Integer, nullable=False, default=6)
    status = Column(String, nullable=False, default="IN_PROGRESS")
    winner = Column(String, nullable=True)  # team, or NULL for a tie
    man_of_match_id = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class MatchPlayer(Base):
    __tablename__ = "match_player"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    player_id = Column(String, nullable=False)
    team = Column(String, nullable=False)  # "A" | "B"
    # dual players may bat for either side
    is_dual_player = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_player_match_id_player_id"),
    )


class Innings(Base):
    __tablename__ = "innings"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    innings_number = Column(Integer, nullable=False, default=1)
    batting_team = Column(String, nullable=False)
    bowling_team = Column(String, nullable=False)
    status = Column(String, nullable=False, default="IN_PROGRESS")
    # Cached view of the ball log; rewritten after every record/undo.
    total_runs = Column(Integer, nullable=False, default=0)
    wickets = Column(Integer, nullable=False, default=0)
    overs = Column(Integer, nullable=False, default=0)
    balls_in_over = Column(Integer, nullable=False, default=0)


class BallEvent(Base):
    """One delivery. Rows are immutable; undo deletes the latest one."""

    __tablename__ = "ball_event"
    id = Column(String, primary_key=True)
    innings_id = Column(String, ForeignKey("innings.id"), nullable=False)
    sequence = Column(Integer, nullable=False)
    operation_id = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    over_number = Column(Integer, nullable=False)
    ball_number = Column(Integer, nullable=False)
    batsman_id = Column(String, nullable=False)
    non_striker_id = Column(String, nullable=False)
    bowler_id = Column(String, nullable=False)
    runs = Column(Integer, nullable=False, default=0)
    is_wide = Column(Boolean, nullable=False, default=False)
    is_no_ball = Column(Boolean, nullable=False, default=False)
    is_wicket = Column(Boolean, nullable=False, default=False)
    striker_changed = Column(Boolean, nullable=False, default=False)
    wicket_type = Column(String, nullable=True)
    fielder_id = Column(String, nullable=True)
    dismissed_batsman_id = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("innings_id", "sequence", name="uq_ball_event_innings_id_sequence"),
        UniqueConstraint(
            "innings_id", "operation_id", name="uq_ball_event_innings_id_operation_id"
        ),
    )


class PlayerMatchStats(Base):
    __tablename__ = "player_match_stats"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    innings_id = Column(String, ForeignKey("innings.id"), nullable=False)
    player_id = Column(String, nullable=False)
    runs = Column(Integer, nullable=False, default=0)
    balls_faced = Column(Integer, nullable=False, default=0)
    fours = Column(Integer, nullable=False, default=0)
    sixes = Column(Integer, nullable=False, default=0)
    balls_bowled = Column(Integer, nullable=False, default=0)
    runs_conceded = Column(Integer, nullable=False, default=0)
    wickets = Column(Integer, nullable=False, default=0)
    maidens = Column(Integer, nullable=False, default=0)
    wides = Column(Integer, nullable=False, default=0)
    no_balls = Column(Integer, nullable=False, default=0)
    catches = Column(Integer, nullable=False, default=0)
    run_outs = Column(Integer, nullable=False, default=0)
    stumpings = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "match_id",
            "innings_id",
            "player_id",
            name="uq_player_match_stats_match_innings_player",
        ),
        Index("ix_player_match_stats_player_id", "player_id"),
    )
