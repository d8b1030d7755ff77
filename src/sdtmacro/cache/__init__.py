"""In-memory aggregate cache for SDT Macro Extender.

Bounded TTL storage of merged lookup tables with stale fallback.
"""

from sdtmacro.cache.store import AggregateCache, CacheEntry

__all__ = ["AggregateCache", "CacheEntry"]
