"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from sdtmacro.config import CacheMode, Settings, clean_urls


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test away from any real .env and SDT_* variables."""
    for name in ("SDT_API_URLS", "SDT_CACHE_MODE", "SDT_LOG_LEVEL", "SDT_CACHE_TTL"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / ".env").write_text("")
    monkeypatch.chdir(tmp_path)


def test_settings_has_defaults():
    """Settings should have sensible defaults for every field."""
    settings = Settings()

    assert settings.api_urls == []
    assert settings.cache_mode == CacheMode.SERVER
    assert settings.log_level == "WARNING"
    assert settings.cache_ttl == 60
    assert settings.http_timeout == 10.0
    assert settings.max_queue_size == 50
    assert settings.max_cache_entries == 100
    assert settings.cache_prune_percent == 0.2
    assert settings.max_stale_age == 300


def test_settings_loads_urls_from_env(monkeypatch):
    """Newline separated URLs are split, trimmed and validated."""
    monkeypatch.setenv(
        "SDT_API_URLS",
        " http://192.168.1.10/json.htm \n\nftp://nope\nhttps://example.com/a.json\nhttp://192.168.1.10/json.htm",
    )

    settings = Settings()

    assert settings.api_urls == ["http://192.168.1.10/json.htm", "https://example.com/a.json"]


def test_settings_loads_from_dotenv(tmp_path):
    """Values in .env are picked up."""
    (tmp_path / ".env").write_text("SDT_CACHE_MODE=client\nSDT_CACHE_TTL=30\n")

    settings = Settings()

    assert settings.cache_mode == CacheMode.CLIENT
    assert settings.cache_ttl == 30


def test_settings_accepts_url_list():
    """A list passed directly is sanitized the same way."""
    settings = Settings(api_urls=["HTTPS://Example.com/x", "", "mailto:me"])

    assert settings.api_urls == ["HTTPS://Example.com/x"]


def test_cache_mode_case_insensitive(monkeypatch):
    monkeypatch.setenv("SDT_CACHE_MODE", "Client")

    assert Settings().cache_mode == CacheMode.CLIENT


def test_settings_validates_cache_mode(monkeypatch):
    monkeypatch.setenv("SDT_CACHE_MODE", "everywhere")

    with pytest.raises(ValidationError):
        Settings()


def test_settings_validates_log_level(monkeypatch):
    """Settings should validate log level."""
    monkeypatch.setenv("SDT_LOG_LEVEL", "INVALID")

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "log_level must be one of" in str(exc_info.value)


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("SDT_LOG_LEVEL", "debug")

    assert Settings().log_level == "DEBUG"


@pytest.mark.parametrize("field,value", [
    ("cache_ttl", 0),
    ("http_timeout", 0),
    ("max_queue_size", 0),
    ("max_cache_entries", 0),
    ("cache_prune_percent", 0),
    ("cache_prune_percent", 1.5),
    ("max_stale_age", -1),
])
def test_settings_rejects_out_of_range(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


class TestCleanUrls:
    """Shared URL sanitizer."""

    def test_none(self):
        assert clean_urls(None) == []

    def test_keeps_order_and_drops_duplicates(self):
        assert clean_urls(["http://b", "http://a", "http://b"]) == ["http://b", "http://a"]

    def test_legacy_string(self):
        assert clean_urls("http://a\r\nhttp://b\n") == ["http://a", "http://b"]

    def test_invalid_logged(self, caplog):
        assert clean_urls(["www.example.com"]) == []
        assert "Skipping invalid URL" in caplog.text
