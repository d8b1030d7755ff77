"""Fetcher: configured URLs -> merged lookup table.

Sources are fetched strictly one after another, each with its own timeout,
and merged in configuration order (later sources win per key). A failing
source never stops the remaining ones.
"""

import logging
from dataclasses import dataclass, field

from sdtmacro.clients import JSONClient, SourceDecodeError, SourceFetchError
from sdtmacro.config import URL_SCHEME_REGEX, settings
from sdtmacro.lookup import LookupTable, merge, normalize

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one fetch cycle over all configured URLs."""

    has_data: bool
    aggregate: LookupTable
    sources: dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "has_data": self.has_data,
            "sources": self.sources,
            **self.aggregate.to_dict(),
        }


class Fetcher:
    """Fetches every configured JSON source and merges the results.

    A new ``JSONClient`` is opened per fetch cycle and shared by all URLs of
    that cycle.

    Usage:
        fetcher = Fetcher()
        result = await fetcher.fetch_all(["http://host/a.json", "http://host/b.json"])
        if result.has_data:
            print(sorted(result.aggregate.by_id))
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize fetcher.

        Args:
            timeout: Per-URL timeout in seconds (default: from settings)
        """
        self.timeout = timeout if timeout is not None else settings.http_timeout

    async def fetch_source(self, client: JSONClient, url: str) -> LookupTable | None:
        """Fetch and normalize a single source.

        Returns:
            The source's lookup table, or None if it yielded nothing usable
        """
        try:
            payload = await client.get_json(url)
        except SourceDecodeError as e:
            logger.warning("JSON decode failed for %s: %s", url, e)
            return None
        except SourceFetchError as e:
            logger.warning("JSON fetch failed for %s: %s", url, e)
            return None

        table = normalize(payload)
        if table is None:
            logger.warning("Unrecognized JSON structure from %s", url)
        return table

    async def fetch_all(self, urls: list[str]) -> FetchResult:
        """Fetch all URLs in order and merge their records.

        Args:
            urls: Source URLs; blank and non-http(s) entries are skipped

        Returns:
            FetchResult with the merged aggregate and per-URL success
        """
        aggregate = LookupTable()
        sources: dict[str, bool] = {}

        async with JSONClient(timeout=self.timeout) as client:
            for index, url in enumerate(urls):
                if not url or not url.strip():
                    logger.debug("Skipping empty URL at index %d", index)
                    continue
                if not URL_SCHEME_REGEX.match(url):
                    logger.warning("Invalid URL format (must start with http:// or https://): %s", url)
                    sources[url] = False
                    continue

                logger.debug("Fetching JSON from %s", url)
                table = await self.fetch_source(client, url)
                if table is not None:
                    merge(aggregate, table)
                sources[url] = table is not None and table.has_data

        has_data = aggregate.has_data
        logger.info(
            "Fetched %d/%d sources (%s)",
            sum(sources.values()), len(sources), "data" if has_data else "no data",
        )
        return FetchResult(has_data=has_data, aggregate=aggregate, sources=sources)
