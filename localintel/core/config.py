"""Application configuration helpers.

Credentials are only ever read from the environment (or a local `.env`):
`GOOGLE_PLACES_API_KEY` and `SERPAPI_API_KEY` are billable keys. A missing key
is not fatal; the strategies that need it are simply skipped and the
resolvers fall back to estimated data.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    google_places_api_key: str = ""
    serpapi_api_key: str = ""
    whois_api_url: str = "https://api.whoapi.com/"
    whois_api_key: str = "free"
    seo_estimate_api_url: str = ""
    request_timeout: float = 10.0
    cache_ttl_seconds: int = 3600
    synthetic_seo_ttl_seconds: int = 1800
    cache_sweep_seconds: int = 300
    detail_fetch_workers: int = 4
    default_phone_region: str = "IN"
    serp_country: str = "in"
    serp_language: str = "en"
    port: int = 8080


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_places_api_key = os.getenv("GOOGLE_PLACES_API_KEY", "")
    serpapi_api_key = os.getenv("SERPAPI_API_KEY", "")
    default_phone_region_raw = os.getenv("DEFAULT_PHONE_REGION") or "IN"

    if not google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; Places lookups will be skipped.")
    if not serpapi_api_key:
        logger.warning("SERPAPI_API_KEY is not configured; SerpAPI lookups will be skipped.")

    return Settings(
        google_places_api_key=google_places_api_key,
        serpapi_api_key=serpapi_api_key,
        whois_api_url=os.getenv("WHOIS_API_URL") or "https://api.whoapi.com/",
        whois_api_key=os.getenv("WHOIS_API_KEY") or "free",
        seo_estimate_api_url=os.getenv("SEO_ESTIMATE_API_URL", ""),
        request_timeout=_get_float("REQUEST_TIMEOUT_SECONDS", 10.0),
        cache_ttl_seconds=_get_int("CACHE_TTL_SECONDS", 3600),
        synthetic_seo_ttl_seconds=_get_int("SYNTHETIC_SEO_TTL_SECONDS", 1800),
        cache_sweep_seconds=_get_int("CACHE_SWEEP_SECONDS", 300),
        detail_fetch_workers=max(1, _get_int("DETAIL_FETCH_WORKERS", 4)),
        default_phone_region=default_phone_region_raw.strip().upper(),
        serp_country=os.getenv("SERP_COUNTRY") or "in",
        serp_language=os.getenv("SERP_LANGUAGE") or "en",
        port=_get_int("PORT", 8080),
    )
