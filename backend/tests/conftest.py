import os
import sys
import asyncio
import uuid

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


@pytest.fixture(scope="session")
def session_loop():
    """Single event loop for all sync fixtures that need to run async DB code."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()

# Register every model with the declarative Base before create_all runs.
from boxcricket import db, models  # noqa: F401
from boxcricket.cache import scorecard_cache

# Honour any externally provided DATABASE_URL (e.g. CI may set a file-backed DB)
# but fall back to an in-memory SQLite database so local runs remain isolated.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def ensure_database(session_loop):
    """Ensure the test database starts clean and honours DATABASE_URL."""

    mp = pytest.MonkeyPatch()
    desired_url = os.getenv("DATABASE_URL") or DEFAULT_DB_URL
    mp.setenv("DATABASE_URL", desired_url)

    if desired_url.startswith("sqlite") and ":memory:" not in desired_url:
        path = desired_url.split("///")[-1]
        if os.path.exists(path):
            os.remove(path)

    db.engine = None
    db.AsyncSessionLocal = None
    yield
    if db.engine is not None:
        session_loop.run_until_complete(db.engine.dispose())
        db.engine = None
    db.AsyncSessionLocal = None
    mp.undo()


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_schema(session_loop):
    """Start every test from empty tables and an empty scorecard cache."""

    engine = db.get_engine()
    session_loop.run_until_complete(_reset_schema(engine))
    session_loop.run_until_complete(scorecard_cache.clear())
    yield


@pytest.fixture
def session_factory():
    return db.get_session_factory()


async def _seed_match(
    *,
    total_overs: int = 6,
    team_a=("a1", "a2", "a3"),
    team_b=("b1", "b2", "b3"),
    dual=(),
    second_innings: bool = True,
):
    """Insert a match with players and innings; returns ``(mid, iid1, iid2)``."""

    mid = uuid.uuid4().hex
    iid1 = uuid.uuid4().hex
    iid2 = uuid.uuid4().hex if second_innings else None
    async with db.get_session_factory()() as session:
        session.add(models.Match(id=mid, total_overs=total_overs))
        for team, players in (("A", team_a), ("B", team_b)):
            for pid in players:
                session.add(
                    models.MatchPlayer(
                        id=uuid.uuid4().hex, match_id=mid, player_id=pid, team=team
                    )
                )
        for pid in dual:
            session.add(
                models.MatchPlayer(
                    id=uuid.uuid4().hex,
                    match_id=mid,
                    player_id=pid,
                    team="A",
                    is_dual_player=True,
                )
            )
        session.add(
            models.Innings(
                id=iid1,
                match_id=mid,
                innings_number=1,
                batting_team="A",
                bowling_team="B",
            )
        )
        if iid2:
            session.add(
                models.Innings(
                    id=iid2,
                    match_id=mid,
                    innings_number=2,
                    batting_team="B",
                    bowling_team="A",
                    status="NOT_STARTED",
                )
            )
        await session.commit()
    return mid, iid1, iid2


@pytest.fixture
def seed_match():
    """Async helper inserting a two-innings match (team A bats first)."""

    return _seed_match
