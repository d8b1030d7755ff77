"""Macro pipeline: request -> cache/queue -> fetch -> render -> downstream.

The pipeline coordinates the entire data flow:
1. Derive the cache key for the request
2. Serve from cache, or fetch all sources (one fetch per key at a time)
3. Normalize and merge source payloads
4. Render macros into the format string
5. Forward to the downstream handler

Components:
- MacroService: Main coordinator
- Fetcher: URLs -> merged LookupTable
- RequestQueue: In-flight flags and waiting requests per key
"""

from sdtmacro.pipeline.fetcher import Fetcher, FetchResult
from sdtmacro.pipeline.queue import PendingRequest, RequestQueue
from sdtmacro.pipeline.request import MacroRequest, RequestStatus
from sdtmacro.pipeline.service import MacroService

__all__ = [
    "Fetcher",
    "FetchResult",
    "PendingRequest",
    "RequestQueue",
    "MacroRequest",
    "RequestStatus",
    "MacroService",
]
