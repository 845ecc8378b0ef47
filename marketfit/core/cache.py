"""In-memory TTL cache shared by every request in the process.

Reads self-evict expired entries. A background sweep task (start/stop) removes
the rest at a fixed interval so memory stays bounded even for keys that are
never read again. Access is guarded by a lock so the cache can be shared with
worker threads.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class CacheEntry:
    """A cached value with its absolute expiry time (clock seconds)."""

    __slots__ = ("value", "expires_at", "created_at")

    def __init__(self, value: Any, expires_at: float, created_at: float) -> None:
        self.value = value
        self.expires_at = expires_at
        self.created_at = created_at

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class TTLCache:
    """Key → value store with per-entry expiry.

    Usage::

        cache = TTLCache(default_ttl_s=180)
        cache.start()            # inside a running event loop
        cache.set("k", {"a": 1})
        cache.get("k")           # {"a": 1}
        await cache.stop()
    """

    def __init__(
        self,
        default_ttl_s: float = 180.0,
        *,
        sweep_interval_s: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl_s = default_ttl_s
        self._sweep_interval_s = sweep_interval_s
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task[None] | None = None
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                del self._entries[key]
                entry = None
            if entry is None:
                self.misses += 1
                return default
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_s: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl_s`` seconds (default TTL if None)."""
        ttl = self._default_ttl_s if ttl_s is None else ttl_s
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(value, now + ttl, now)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("Cache sweep removed %d expired entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def default_ttl_s(self) -> float:
        return self._default_ttl_s

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def start(self) -> None:
        """Start the periodic sweep on the running event loop. Idempotent."""
        if self.running:
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())
        logger.debug("Cache sweep started (every %.0fs)", self._sweep_interval_s)

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Cache sweep stopped")

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval_s)
            self.sweep()

