import os
import sys

import anyio
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from boxcricket.cache import TTLCache


@pytest.mark.anyio
async def test_get_set_and_expiry(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("boxcricket.cache.time.monotonic", lambda: now[0])
    cache = TTLCache(ttl_seconds=10)

    await cache.set(("m1", "i1"), "card")
    assert await cache.get(("m1", "i1")) == "card"
    now[0] += 11
    assert await cache.get(("m1", "i1")) is None

    await cache.set("k", "v", ttl_seconds=0)
    assert await cache.get("k") is None


@pytest.mark.anyio
async def test_invalidate_match_drops_all_innings():
    cache = TTLCache()
    await cache.set(("m1", "i1"), 1)
    await cache.set(("m1", "i2"), 2)
    await cache.set(("m2", "i1"), 3)

    await cache.invalidate_match("m1")
    assert await cache.get(("m1", "i1")) is None
    assert await cache.get(("m1", "i2")) is None
    assert await cache.get(("m2", "i1")) == 3

    await cache.invalidate(("m2", "i1"))
    assert await cache.get(("m2", "i1")) is None


@pytest.mark.anyio
async def test_get_or_load_calls_loader_once():
    cache = TTLCache()
    calls = []

    async def loader():
        calls.append(1)
        return {"totalRuns": 4}

    assert await cache.get_or_load(("m1", "i1"), loader) == {"totalRuns": 4}
    assert await cache.get_or_load(("m1", "i1"), loader) == {"totalRuns": 4}
    assert len(calls) == 1


@pytest.mark.anyio
async def test_invalidation_during_load_is_not_cached():
    cache = TTLCache()
    started = anyio.Event()
    release = anyio.Event()

    async def slow_loader():
        started.set()
        await release.wait()
        return "stale"

    results = []

    async def load():
        results.append(await cache.get_or_load(("m", "i"), slow_loader))

    async with anyio.create_task_group() as tg:
        tg.start_soon(load)
        await started.wait()
        await cache.invalidate_match("m")
        release.set()

    assert results == ["stale"]
    assert await cache.get(("m", "i")) is None

    async def fresh_loader():
        return "fresh"

    assert await cache.get_or_load(("m", "i"), fresh_loader) == "fresh"
    assert await cache.get(("m", "i")) == "fresh"
