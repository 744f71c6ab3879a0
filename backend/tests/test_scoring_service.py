import os
import sys

import pytest
from sqlalchemy import select

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from boxcricket.exceptions import (
    BallNotLast,
    InningsCompleted,
    InningsNotFound,
    MatchNotFound,
)
from boxcricket.models import BallEvent, Innings, Match, PlayerMatchStats
from boxcricket.scoring import BallInput, Crease, ValidationError, WicketType
from boxcricket.services import scoring

CREASE = Crease("a1", "a2", "b1")


@pytest.mark.anyio
async def test_record_ball_persists_row_and_caches(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        result = await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=4))

    assert result.ball.id
    assert not result.ball.id.startswith("tmp-")
    assert result.score.total_runs == 4
    assert result.score.balls_in_over == 1

    async with session_factory() as session:
        rows = (await session.execute(select(BallEvent))).scalars().all()
        innings = await session.get(Innings, iid)
        stats = (
            await session.execute(
                select(PlayerMatchStats).where(PlayerMatchStats.player_id == "a1")
            )
        ).scalar_one()
    assert [r.id for r in rows] == [result.ball.id]
    assert rows[0].sequence == 1
    assert innings.total_runs == 4
    assert stats.runs == 4
    assert stats.fours == 1


@pytest.mark.anyio
async def test_score_comes_from_log_not_cached_columns(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=2))
        innings = await session.get(Innings, iid)
        innings.total_runs = 999
        await session.commit()

    async with session_factory() as session:
        result = await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=1))
    assert result.score.total_runs == 3


@pytest.mark.anyio
async def test_record_is_idempotent_per_operation(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        first = await scoring.record_ball(
            session, mid, iid, CREASE, BallInput(runs=1), operation_id="op-1"
        )
    async with session_factory() as session:
        again = await scoring.record_ball(
            session, mid, iid, CREASE, BallInput(runs=1), operation_id="op-1"
        )
        count = len((await session.execute(select(BallEvent))).scalars().all())

    assert again.ball == first.ball
    assert again.score == first.score
    assert count == 1


@pytest.mark.anyio
async def test_streak_bonus_persisted(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=4))
        await scoring.record_ball(session, mid, iid, CREASE, BallInput(is_wide=True))
        result = await scoring.record_ball(session, mid, iid, CREASE, BallInput(is_wide=True))
    assert result.ball.runs == 1
    assert result.score.total_runs == 5
    assert result.score.balls_in_over == 1


@pytest.mark.anyio
async def test_invalid_ball_is_not_persisted(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        with pytest.raises(ValidationError):
            await scoring.record_ball(session, mid, iid, Crease("a1", "a2", None), BallInput())
        rows = (await session.execute(select(BallEvent))).scalars().all()
    assert rows == []


@pytest.mark.anyio
async def test_unknown_match_and_innings(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    _, other_iid, _ = await seed_match()
    async with session_factory() as session:
        with pytest.raises(MatchNotFound):
            await scoring.record_ball(session, "nope", iid, CREASE, BallInput())
        with pytest.raises(InningsNotFound):
            await scoring.record_ball(session, mid, "nope", CREASE, BallInput())
        with pytest.raises(InningsNotFound):
            await scoring.get_scorecard(session, mid, other_iid)


@pytest.mark.anyio
async def test_undo_last_ball(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        first = await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=1))
        second = await scoring.record_ball(
            session, mid, iid, Crease("a2", "a1", "b1"), BallInput(runs=6)
        )
        undo = await scoring.undo_last_ball(session, mid, iid)

    assert undo.deleted_ball.id == second.ball.id
    assert undo.remaining_balls == [first.ball]
    assert undo.score == first.score

    async with session_factory() as session:
        card = await scoring.get_scorecard(session, mid, iid)
        a2_stats = (
            await session.execute(
                select(PlayerMatchStats).where(PlayerMatchStats.player_id == "a2")
            )
        ).scalars().all()
    assert card.score.total_runs == 1
    assert "a2" not in card.stats_by_player
    assert a2_stats == []


@pytest.mark.anyio
async def test_undo_empty_and_by_ball_id(session_factory, seed_match):
    mid, iid, _ = await seed_match()
    async with session_factory() as session:
        empty = await scoring.undo_last_ball(session, mid, iid)
        assert empty.deleted_ball is None
        assert empty.remaining_balls == []

        first = await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=2))
        await scoring.record_ball(session, mid, iid, CREASE, BallInput(runs=3))
        with pytest.raises(BallNotLast):
            await scoring.undo_last_ball(session, mid, iid, ball_id=first.ball.id)

        gone = await scoring.undo_last_ball(session, mid, iid, ball_id="already-gone")
        assert gone.deleted_ball is None
        assert gone.score.total_runs == 5


@pytest.mark.anyio
async def test_complete_innings_then_record_rejected(session_factory, seed_match):
    mid, iid1, iid2 = await seed_match()
    async with session_factory() as session:
        await scoring.record_ball(session, mid, iid1, CREASE, BallInput(runs=6))
        completion = await scoring.complete_innings(session, mid, iid1)
        assert completion.second_innings_started is True
        assert completion.match_completed is False

        with pytest.raises(InningsCompleted):
            await scoring.record_ball(session, mid, iid1, CREASE, BallInput(runs=1))
        with pytest.raises(InningsCompleted):
            await scoring.undo_last_ball(session, mid, iid1)
        with pytest.raises(InningsCompleted):
            await scoring.complete_innings(session, mid, iid1)

        second = await session.get(Innings, iid2)
        assert second.status == scoring.IN_PROGRESS


@pytest.mark.anyio
async def test_second_innings_target_and_winner(session_factory, seed_match):
    mid, iid1, iid2 = await seed_match()
    chase = Crease("b1", "b2", "a1")
    async with session_factory() as session:
        await scoring.record_ball(session, mid, iid1, CREASE, BallInput(runs=4))
        await scoring.complete_innings(session, mid, iid1)

        level = await scoring.record_ball(session, mid, iid2, chase, BallInput(runs=4))
        assert level.status.is_target_reached is False
        won = await scoring.record_ball(session, mid, iid2, chase, BallInput(runs=1))
        assert won.status.is_target_reached is True
        assert won.status.can_complete_innings is True

        completion = await scoring.complete_innings(session, mid, iid2)
        match = await session.get(Match, mid)
    assert completion.match_completed is True
    assert completion.winner == "B"
    assert match.status == scoring.COMPLETED
    # a1: 4 off 1 ball, then 5 off 2 balls bowled; b1: 5 off 2, then 4 off 1 bowled
    assert completion.man_of_match_id == "a1"
    assert match.man_of_match_id == "a1"


@pytest.mark.anyio
async def test_all_out_counts_dual_players(session_factory, seed_match):
    # team A: a1, a2 plus dual d1 -> side of 3, all out at 2 wickets
    mid, iid, _ = await seed_match(team_a=("a1", "a2"), dual=("d1",))
    bowled = BallInput(is_wicket=True, wicket_type=WicketType.BOWLED)
    async with session_factory() as session:
        one = await scoring.record_ball(session, mid, iid, Crease("a1", "a2", "b1"), bowled)
        two = await scoring.record_ball(session, mid, iid, Crease("d1", "a2", "b1"), bowled)
    assert one.status.is_all_out is False
    assert two.status.is_all_out is True
    assert two.score.wickets == 2
