"""In-memory TTL cache of merged lookup tables.

Entries are keyed by cache key (per URL set or per client) and replaced
wholesale on every successful fetch cycle. Size is bounded: once the cache
reaches ``max_entries`` a pruning pass runs before the next insert.

Pruning strategy:
    1. Remove every entry that has already expired.
    2. If the cache is still full, remove the ``prune_percent`` share
       (rounded up, at least one) of entries closest to expiry.

Expired entries are kept until pruned or replaced so they can serve as a
stale fallback when every source fails.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from sdtmacro.lookup import LookupTable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """One cached aggregate and the epoch second it stops being fresh."""

    expires_at: float
    aggregate: LookupTable


class AggregateCache:
    """TTL cache for aggregates with bounded size and stale fallback.

    Args:
        ttl: Seconds an entry stays fresh (default: 60)
        max_entries: Size at which pruning kicks in (default: 100)
        prune_percent: Share of entries evicted by expiry order (default: 0.2)
        max_stale_age: Oldest entry age (seconds) usable as fallback (default: 300)
        clock: Time source returning epoch seconds (default: time.time)
    """

    def __init__(
        self,
        ttl: int = 60,
        max_entries: int = 100,
        prune_percent: float = 0.2,
        max_stale_age: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self.prune_percent = prune_percent
        self.max_stale_age = max_stale_age
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for ``key``, fresh or not."""
        return self._entries.get(key)

    def get(self, key: str) -> LookupTable | None:
        """Return the aggregate for ``key`` if it has not expired."""
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at > self._clock():
            return entry.aggregate
        return None

    def put(self, key: str, aggregate: LookupTable) -> None:
        """Store ``aggregate`` under ``key`` for ``ttl`` seconds, pruning first if full."""
        if len(self._entries) >= self.max_entries:
            self.prune()
        self._entries[key] = CacheEntry(expires_at=self._clock() + self.ttl, aggregate=aggregate)
        logger.debug("Cached results for %s (cache size: %d)", key, len(self._entries))

    def prune(self) -> int:
        """Evict entries when the cache is full.

        Returns:
            Number of entries removed
        """
        initial_count = len(self._entries)
        if initial_count < self.max_entries:
            return 0

        logger.debug("Pruning cache (current size: %d)", initial_count)

        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]
        removed = len(expired)
        if removed:
            logger.debug("Removed %d expired cache entries", removed)

        if len(self._entries) >= self.max_entries:
            by_expiry = sorted(self._entries, key=lambda k: self._entries[k].expires_at)
            to_remove = max(1, math.ceil(len(by_expiry) * self.prune_percent))
            for key in by_expiry[:to_remove]:
                del self._entries[key]
            removed += to_remove

        logger.debug(
            "Pruned total of %d cache entries (was: %d, now: %d)",
            removed, initial_count, len(self._entries),
        )
        return removed

    def stale(self, key: str) -> LookupTable | None:
        """Return a previously cached aggregate as fallback, if young enough.

        Age is measured from when the entry was stored, not from its expiry.
        Entries older than ``max_stale_age`` are deleted.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - (entry.expires_at - self.ttl)
        if age <= self.max_stale_age:
            logger.warning("All fetches failed for key %s, using stale cache (age: %.0fs)", key, age)
            return entry.aggregate

        logger.error(
            "All fetches failed for key %s, stale cache too old (age: %.0fs > %ds), discarding",
            key, age, self.max_stale_age,
        )
        del self._entries[key]
        return None
