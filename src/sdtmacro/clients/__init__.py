"""HTTP client layer for SDT Macro Extender.

Async client for fetching JSON payloads from the configured data sources
(home-automation controllers, weather stations, any JSON endpoint).
"""

from sdtmacro.clients.base import JSONClient, SourceDecodeError, SourceFetchError

__all__ = [
    "JSONClient",
    "SourceDecodeError",
    "SourceFetchError",
]
