"""Single-flight LRU cache of generated artifacts.

All bookkeeping happens on one event loop. Each state transition (hit with
recency refresh, in-flight registration, publish plus eviction, failure) runs
without an ``await`` in the middle, so other tasks never observe a half-done
transition. The generator runs in its own task outside those transitions.
Waiters await a shielded future, so a disconnecting client cannot cancel a
generation that others are waiting on.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional

from ..errors import TimelapseError
from ..models.cache import CacheEntry, CacheStats
from ..models.generation import CacheKey

logger = logging.getLogger(__name__)

Generator = Callable[[], Awaitable[bytes]]


class GenerationCache:
    def __init__(self, capacity: int = 10, max_bytes: Optional[int] = None):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.max_bytes = max_bytes
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._in_flight: dict[CacheKey, asyncio.Future] = {}
        self._tasks: set[asyncio.Task] = set()
        self._total_bytes = 0
        self._hits = 0
        self._misses = 0
        self._joins = 0
        self._evictions = 0
        self._failures = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the entry for ``key`` and mark it most recently used."""
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def is_generating(self, key: CacheKey) -> bool:
        return key in self._in_flight

    async def get_or_generate(
        self,
        key: CacheKey,
        generator: Generator,
        content_type: str = "application/octet-stream",
    ) -> CacheEntry:
        """Return the cached entry for ``key``, generating it at most once.

        Concurrent callers for a key that is already being generated wait for
        that generation. Generator errors are raised to every waiter and
        nothing is cached.
        """
        entry = self.get(key)
        if entry is not None:
            self._hits += 1
            logger.debug(f"Cache hit {key.digest}")
            return entry

        future = self._in_flight.get(key)
        if future is None:
            self._misses += 1
            logger.info(f"Cache miss {key.digest}, generating")
            future = asyncio.get_running_loop().create_future()
            future.add_done_callback(_consume_exception)
            self._in_flight[key] = future
            task = asyncio.create_task(self._generate(key, generator, content_type, future))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            self._joins += 1
            logger.info(f"Joining in-flight generation {key.digest}")

        return await asyncio.shield(future)

    async def _generate(
        self,
        key: CacheKey,
        generator: Generator,
        content_type: str,
        future: asyncio.Future,
    ) -> None:
        started = time.monotonic()
        try:
            content = await generator()
            entry = CacheEntry(key=key, content=bytes(content), content_type=content_type)
        except asyncio.CancelledError:
            self._in_flight.pop(key, None)
            future.cancel()
            raise
        except Exception as e:
            # Client-side outcomes such as an empty selection are not server faults
            level = logging.INFO if isinstance(e, TimelapseError) and e.status_code < 500 else logging.WARNING
            logger.log(level, f"Generation {key.digest} failed: {type(e).__name__}: {e}")
            self._fail(key, future, e)
            return

        del self._in_flight[key]
        self._insert(entry)
        future.set_result(entry)
        logger.info(
            f"Generated {key.digest}: {entry.size_bytes} bytes "
            f"in {time.monotonic() - started:.1f}s"
        )

    def _fail(self, key: CacheKey, future: asyncio.Future, error: Exception) -> None:
        self._failures += 1
        self._in_flight.pop(key, None)
        if not future.done():
            future.set_exception(error)

    def _insert(self, entry: CacheEntry) -> None:
        previous = self._entries.pop(entry.key, None)
        if previous is not None:
            self._total_bytes -= previous.size_bytes
        self._entries[entry.key] = entry
        self._total_bytes += entry.size_bytes
        self._evict()

    def _evict(self) -> None:
        # The newest entry is never evicted by its own insertion
        while len(self._entries) > 1 and self._over_budget():
            key, entry = next(iter(self._entries.items()))
            del self._entries[key]
            self._total_bytes -= entry.size_bytes
            self._evictions += 1
            logger.info(f"Evicted {key.digest} ({entry.size_bytes} bytes)")

    def _over_budget(self) -> bool:
        if len(self._entries) > self.capacity:
            return True
        return self.max_bytes is not None and self._total_bytes > self.max_bytes

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            total_bytes=self._total_bytes,
            capacity=self.capacity,
            max_bytes=self.max_bytes,
            in_flight=len(self._in_flight),
            hits=self._hits,
            misses=self._misses,
            joins=self._joins,
            evictions=self._evictions,
            failures=self._failures,
        )

    async def close(self) -> None:
        """Cancel outstanding generations and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._entries.clear()
        self._total_bytes = 0


def _consume_exception(future: asyncio.Future) -> None:
    # Avoid "exception was never retrieved" when every waiter has gone away
    if not future.cancelled():
        future.exception()
