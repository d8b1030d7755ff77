"""Async JSON source client with connection pooling.

Every configured data source is a plain absolute URL returning JSON. The
client issues exactly one GET per call with a fixed timeout; a failed source
is reported through ``SourceFetchError`` and left to the caller to absorb.

Usage:
    async with JSONClient(timeout=10.0) as client:
        payload = await client.get_json("http://192.168.1.10:8080/json.htm?type=devices")
"""

import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 500


class SourceFetchError(Exception):
    """Base exception for data source errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class SourceDecodeError(SourceFetchError):
    """The source answered, but the body is not valid JSON."""


class JSONClient:
    """Async HTTP client for fetching JSON documents from absolute URLs.

    Args:
        timeout: Request timeout in seconds (default: 10)
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "JSONClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(self, url: str) -> Any:
        """GET ``url`` once and decode the JSON body.

        Args:
            url: Absolute http(s) URL

        Returns:
            Decoded JSON document (any JSON type)

        Raises:
            SourceFetchError: On timeout, transport error or non-2xx status
            SourceDecodeError: If the body is not valid JSON
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        logger.debug("GET %s (timeout=%.1fs)", url, self.timeout)

        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise SourceFetchError(f"Request timeout: {e}")
        except httpx.HTTPError as e:
            raise SourceFetchError(f"Network error: {e}")

        logger.debug("Response: %d for %s", response.status_code, url)

        if not response.is_success:
            raise SourceFetchError(
                message=f"Request failed: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:_ERROR_BODY_LIMIT],
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceDecodeError(
                message=f"Invalid JSON response: {e}",
                status_code=response.status_code,
                response_body=response.text[:_ERROR_BODY_LIMIT],
            )
