"""Configuration management for SDT Macro Extender.

Loads data source URLs and cache tuning from environment variables using
Pydantic. Variables are prefixed with ``SDT_`` and may also live in ``.env``.

Usage:
    from sdtmacro.config import settings

    print(settings.api_urls)    # Sanitized at import
    print(settings.cache_mode)  # CacheMode.SERVER by default
"""

import logging
import re
from enum import Enum
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


logger = logging.getLogger(__name__)

URL_SCHEME_REGEX = re.compile(r"^https?://", re.IGNORECASE)


class CacheMode(str, Enum):
    """How fetched data is shared between clients."""

    SERVER = "server"  # One cache entry per configured URL set
    CLIENT = "client"  # One cache entry per player


def clean_urls(raw: Any) -> list[str]:
    """Sanitize a configured URL list.

    Accepts a sequence of strings or a single newline separated string.
    Entries are trimmed, blanks are dropped, anything not starting with
    ``http://`` or ``https://`` is dropped with a warning, and duplicates are
    removed keeping the first occurrence.

    Args:
        raw: URL list or legacy string value

    Returns:
        Ordered list of usable URLs
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        candidates = re.split(r"[\r\n]+", raw)
    else:
        candidates = list(raw)

    urls: list[str] = []
    for candidate in candidates:
        if candidate is None:
            continue
        url = str(candidate).strip()
        if not url:
            continue
        if not URL_SCHEME_REGEX.match(url):
            logger.warning("Skipping invalid URL (missing http:// or https://): %s", url)
            continue
        if url not in urls:
            urls.append(url)
    return urls


class Settings(BaseSettings):
    """SDT Macro Extender configuration from environment variables.

    Loads from .env file automatically. Validates on instantiation.
    Nothing is required: with no URLs configured, every display string is
    passed through untouched.

    Attributes:
        api_urls: JSON endpoints, fetched in order and merged
        cache_mode: Share fetched data server-wide or per client
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
        cache_ttl: Seconds a fetched aggregate stays fresh
        http_timeout: Per-URL request timeout (seconds)
        max_queue_size: Requests allowed to wait on one in-flight fetch
        max_cache_entries: Cache size that triggers pruning
        cache_prune_percent: Share of entries evicted when pruning by expiry
        max_stale_age: Oldest cached data (seconds) served when all fetches fail
    """

    model_config = SettingsConfigDict(
        env_prefix="SDT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # Data sources
    api_urls: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="JSON endpoint URLs (list, or newline separated)",
    )
    cache_mode: CacheMode = Field(default=CacheMode.SERVER, description="Cache sharing mode")

    # System Settings
    log_level: str = Field(default="WARNING", description="Logging level")

    # Cache / queue tuning
    cache_ttl: int = Field(default=60, ge=1, description="Fresh cache lifetime (seconds)")
    http_timeout: float = Field(default=10.0, gt=0, description="Per-URL HTTP timeout (seconds)")
    max_queue_size: int = Field(default=50, ge=1, description="Max queued requests per cache key")
    max_cache_entries: int = Field(default=100, ge=1, description="Max cache entries before pruning")
    cache_prune_percent: float = Field(
        default=0.2,
        gt=0,
        le=1,
        description="Fraction of soonest-to-expire entries pruned when cache is full",
    )
    max_stale_age: int = Field(
        default=300,
        ge=0,
        description="Max age (seconds) of cached data used as fallback when all fetches fail",
    )

    @field_validator("api_urls", mode="before")
    @classmethod
    def validate_api_urls(cls, v: Any) -> list[str]:
        """Trim, validate and de-duplicate configured URLs."""
        return clean_urls(v)

    @field_validator("cache_mode", mode="before")
    @classmethod
    def validate_cache_mode(cls, v: Any) -> Any:
        """Accept cache mode in any letter case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper


# Global settings instance, loaded once at import
settings = Settings()
