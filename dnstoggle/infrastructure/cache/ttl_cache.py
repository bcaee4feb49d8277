from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    entries: int
    expired: int


class TTLCache:
    """
    In-process key -> value cache with per-entry expiry.

    - get() never returns an entry at or past its expiry; such entries are dropped.
    - set() on an existing key replaces it and counts as a fresh insertion.
    - Over max_entries: expired entries go first, then oldest-by-insertion.
    - start() runs a periodic sweep on the event loop; aclose() stops it.
    - get_or_load() coalesces concurrent misses of the same key into one load.

    The backing dict is guarded by a lock so the cache can also be touched
    from threads other than the event loop's.
    """

    def __init__(
        self,
        *,
        default_ttl: float = 300.0,
        max_entries: Optional[int] = None,
        sweep_interval: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._inflight: dict[str, asyncio.Future] = {}
        self._sweeper: Optional[asyncio.Task] = None

    @staticmethod
    def make_key(endpoint: str, **params: Any) -> str:
        parts = [endpoint]
        for name in sorted(params):
            value = params[name]
            if value is not None:
                parts.append(f"{name}={value}")
        return "|".join(parts)

    def _lookup(self, key: str) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            if entry.is_expired(now):
                del self._entries[key]
                return _MISSING
            return entry.value

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def contains(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            self._enforce_limit()

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
        # loads started before the removal must not repopulate the key
        self._inflight.pop(key, None)

    def remove_matching(self, fragment: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if fragment in k]
            for k in doomed:
                del self._entries[k]
        for k in [k for k in self._inflight if fragment in k]:
            del self._inflight[k]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._inflight.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            expired = sum(1 for e in self._entries.values() if e.is_expired(now))
            return CacheStats(entries=len(self._entries), expired=expired)

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            doomed = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("cache sweep", extra={"removed": len(doomed)})
        return len(doomed)

    def _enforce_limit(self) -> None:
        # caller holds the lock
        if self._max_entries is None or len(self._entries) <= self._max_entries:
            return
        now = self._clock()
        for k in [k for k, e in self._entries.items() if e.is_expired(now)]:
            del self._entries[k]
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        value = self._lookup(key)
        if value is not _MISSING:
            logger.debug("cache hit", extra={"key": key})
            return value

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        logger.debug("cache miss", extra={"key": key})
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = fut
        try:
            value = await loader()
        except asyncio.CancelledError:
            fut.cancel()
            raise
        except BaseException as e:
            fut.set_exception(e)
            # mark retrieved; waiters (if any) still receive it
            fut.exception()
            raise
        else:
            # key invalidated while loading: waiters get the value, the cache does not
            if self._inflight.get(key) is fut:
                self.set(key, value, ttl)
            else:
                logger.debug("stale load discarded", extra={"key": key})
            fut.set_result(value)
            return value
        finally:
            if self._inflight.get(key) is fut:
                del self._inflight[key]

    def start(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    async def aclose(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
