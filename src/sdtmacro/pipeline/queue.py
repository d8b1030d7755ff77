"""Per-key request queue.

Tracks which cache keys have a fetch in flight and parks the requests that
arrive meanwhile. All state is mutated from the event loop thread only, and
never across an ``await``, so no locking is needed.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterator

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """A request waiting for the in-flight fetch of its cache key."""

    request: Any
    done: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())

    def resolve(self) -> None:
        """Mark the request as delivered, waking its caller."""
        if not self.done.done():
            self.done.set_result(None)


class RequestQueue:
    """In-flight flags and FIFO queues, one per cache key.

    Args:
        max_size: Requests allowed to wait per key (default: 50)
    """

    def __init__(self, max_size: int = 50) -> None:
        self.max_size = max_size
        self._processing: dict[str, bool] = {}
        self._queues: dict[str, deque[PendingRequest]] = {}

    def is_processing(self, key: str) -> bool:
        return self._processing.get(key, False)

    def begin(self, key: str) -> None:
        """Flag a fetch as in flight for ``key``."""
        self._processing[key] = True

    def end(self, key: str) -> None:
        """Clear the in-flight flag for ``key``."""
        self._processing[key] = False

    def size(self, key: str) -> int:
        return len(self._queues.get(key, ()))

    def enqueue(self, key: str, request: Any) -> PendingRequest | None:
        """Park ``request`` behind the in-flight fetch for ``key``.

        Returns:
            The pending entry, or None if the queue is full
        """
        queue = self._queues.setdefault(key, deque())
        if len(queue) >= self.max_size:
            return None
        pending = PendingRequest(request=request)
        queue.append(pending)
        return pending

    def drain(self, key: str) -> Iterator[PendingRequest]:
        """Pop queued requests for ``key`` in arrival order."""
        queue = self._queues.get(key)
        while queue:
            yield queue.popleft()
