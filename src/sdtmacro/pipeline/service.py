"""MacroService: main macro-string handler.

Wires the pipeline for every display refresh:

    request -> cache key -> cache hit | new fetch | wait on in-flight fetch
            -> render macros -> downstream handler

Guarantees:
    - At most one fetch in flight per cache key.
    - Requests queued behind a fetch see the same aggregate as the request
      that started it, delivered in arrival order.
    - Every request is forwarded downstream exactly once, rendered or as-is.

Usage:
    service = MacroService(urls=["http://192.168.1.10/json.htm"], downstream=next_handler)
    await service.macro_string(MacroRequest(format="Out: ~eTempOutside~Value~round~1~ C"))
"""

import asyncio
import hashlib
import logging
from typing import Any, Callable, Iterable

from sdtmacro.cache import AggregateCache
from sdtmacro.config import CacheMode, clean_urls, settings
from sdtmacro.lookup import LookupTable
from sdtmacro.macros import contains_macros, render
from sdtmacro.pipeline.fetcher import Fetcher, FetchResult
from sdtmacro.pipeline.queue import RequestQueue

logger = logging.getLogger(__name__)

RESULT_NAME = "macroString"
DEFAULT_CLIENT_KEY = "server"
SERVER_KEY_PREFIX = "server:"
URL_SEPARATOR = "\x00"  # Never valid inside a URL

DownstreamHandler = Callable[[Any], Any]


class MacroService:
    """Owns the cache, the per-key queues and the fetcher for one host process.

    Args:
        urls: Source URLs (default: settings.api_urls); sanitized on assignment
        cache_mode: Share data server-wide or per client (default: from settings)
        downstream: Previously registered handler to forward requests to;
            when None, requests are simply marked done
        fetcher: Fetcher to use (default: new Fetcher)
        cache: Aggregate cache (default: built from settings)
        queue: Request queue (default: built from settings)
    """

    def __init__(
        self,
        urls: Iterable[str] | None = None,
        cache_mode: CacheMode | str | None = None,
        downstream: DownstreamHandler | None = None,
        fetcher: Fetcher | None = None,
        cache: AggregateCache | None = None,
        queue: RequestQueue | None = None,
    ) -> None:
        self.urls = urls if urls is not None else settings.api_urls
        self.cache_mode = CacheMode(cache_mode) if cache_mode is not None else settings.cache_mode
        self.downstream = downstream
        self.fetcher = fetcher if fetcher is not None else Fetcher()
        self.cache = cache if cache is not None else AggregateCache(
            ttl=settings.cache_ttl,
            max_entries=settings.max_cache_entries,
            prune_percent=settings.cache_prune_percent,
            max_stale_age=settings.max_stale_age,
        )
        self.queue = queue if queue is not None else RequestQueue(max_size=settings.max_queue_size)

    @property
    def urls(self) -> list[str]:
        return self._urls

    @urls.setter
    def urls(self, value: Iterable[str]) -> None:
        self._urls = clean_urls(value)

    async def macro_string(self, request: Any) -> None:
        """Handle one macro-string request from the host.

        Requests without configured URLs or without anything macro-shaped in
        their format are forwarded immediately.
        """
        fmt = request.format or ""
        if not self.urls or not contains_macros(fmt):
            self._call_next(request, fmt)
            return
        await self.handle(request)

    def cache_key(self, request: Any) -> str:
        """Cache key for ``request`` under the configured cache mode."""
        if self.cache_mode == CacheMode.SERVER:
            digest = hashlib.md5(URL_SEPARATOR.join(self.urls).encode("utf-8")).hexdigest()
            return f"{SERVER_KEY_PREFIX}{digest}"
        client_id = getattr(request, "client_id", None)
        return str(client_id) if client_id else DEFAULT_CLIENT_KEY

    async def handle(self, request: Any) -> None:
        """Serve ``request`` from cache, start a fetch, or wait on one.

        Returns once the request has been forwarded downstream.
        """
        key = self.cache_key(request)

        if not self.queue.is_processing(key):
            aggregate = self.cache.get(key)
            if aggregate is not None:
                self._process_one(request, aggregate)
                return

            self.queue.begin(key)
            request.set_processing()
            try:
                result = await self._fetch()
            except asyncio.CancelledError:
                self.on_fetch_complete(key, request, FetchResult(has_data=False, aggregate=LookupTable()))
                raise
            self.on_fetch_complete(key, request, result)
            return

        pending = self.queue.enqueue(key, request)
        if pending is None:
            logger.warning("Request queue full for key %s, dropping request", key)
            self._call_next(request, request.format or "")
            return

        request.set_processing()
        await pending.done

    async def _fetch(self) -> FetchResult:
        try:
            return await self.fetcher.fetch_all(list(self.urls))
        except Exception as e:
            logger.error("Fetch cycle failed: %s", e, exc_info=True)
            return FetchResult(has_data=False, aggregate=LookupTable())

    def on_fetch_complete(self, key: str, initiator: Any | None, result: FetchResult) -> None:
        """Cache or fall back, then deliver to the initiator and every queued request.

        Args:
            key: Cache key the fetch ran for
            initiator: Request that started the fetch (may be None)
            result: Outcome of the fetch cycle
        """
        aggregate: LookupTable | None = None
        if result.has_data:
            aggregate = result.aggregate
            self.cache.put(key, aggregate)
        elif key in self.cache:
            aggregate = self.cache.stale(key)

        try:
            if initiator is not None:
                self._process_one(initiator, aggregate)
            for pending in self.queue.drain(key):
                use = aggregate if aggregate is not None else self.cache.get(key)
                try:
                    self._process_one(pending.request, use)
                finally:
                    pending.resolve()
        finally:
            self.queue.end(key)

    def _process_one(self, request: Any, aggregate: LookupTable | None) -> None:
        fmt = request.format or ""
        if aggregate is None:
            self._call_next(request, fmt)
            return
        self._call_next(request, render(fmt, aggregate))

    def _call_next(self, request: Any, fmt: str) -> None:
        """Store the final string on the request and forward it downstream."""
        request.add_result(RESULT_NAME, fmt)
        request.format = fmt

        if self.downstream is None:
            request.set_done()
            return

        try:
            self.downstream(request)
        except Exception:
            logger.exception("Error while calling chained macro handler")
            request.set_failed()
