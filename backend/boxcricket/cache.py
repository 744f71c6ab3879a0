from __future__ import annotations

from asyncio import Lock
import time
from typing import Any, Awaitable, Callable

from .config import SCORECARD_CACHE_TTL


class TTLCache:
    """A simple in-memory TTL cache with async-safe access.

    Every key carries a generation that invalidation bumps, so a load that was
    already running when its key was invalidated never stores its result.
    """

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}
        self._generations: dict[Any, int] = {}

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: Any, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        expires_at = time.monotonic() + max(ttl, 0.0)
        async with self._lock:
            if ttl <= 0:
                self._store.pop(key, None)
            else:
                self._store[key] = (value, expires_at)

    def _bump(self, key: Any) -> None:
        # caller holds the lock
        self._store.pop(key, None)
        if key in self._generations:
            self._generations[key] += 1

    async def invalidate(self, key: Any) -> None:
        async with self._lock:
            self._bump(key)

    async def invalidate_match(self, match_id: str) -> None:
        """Drop every entry keyed ``(match_id, ...)``, loaded or loading."""
        async with self._lock:
            for key in set(self._store) | set(self._generations):
                if isinstance(key, tuple) and key and key[0] == match_id:
                    self._bump(key)

    async def get_or_load(self, key: Any, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value, or await ``loader`` and cache its result.

        The loader runs outside the lock. Its result is returned either way but
        is only cached if ``key`` was not invalidated in the meantime.
        """
        value = await self.get(key)
        if value is not None:
            return value
        async with self._lock:
            generation = self._generations.setdefault(key, 0)
        value = await loader()
        ttl = self._ttl
        async with self._lock:
            if self._generations.get(key) == generation and ttl > 0:
                self._store[key] = (value, time.monotonic() + ttl)
        return value

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            for key in self._generations:
                self._generations[key] += 1


# keyed (match_id, innings_id)
scorecard_cache = TTLCache(ttl_seconds=SCORECARD_CACHE_TTL)
