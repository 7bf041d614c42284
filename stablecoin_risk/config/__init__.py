"""Runtime configuration."""

from .settings import (
    COINGECKO_API_URL,
    COINGECKO_API_KEY,
    DEFILLAMA_STABLECOINS_URL,
    GITHUB_API_URL,
    GITHUB_RAW_URL,
    GITHUB_TOKEN,
    REQUEST_TIMEOUT_SECONDS,
    WEB_TIMEOUT_SECONDS,
    MAX_RETRIES,
    CACHE_TTL_CONFIG,
    PRICE_HISTORY_DAYS,
    AUDIT_LOOKBACK_MONTHS,
    MAX_FETCH_WORKERS,
)

__all__ = [
    "COINGECKO_API_URL",
    "COINGECKO_API_KEY",
    "DEFILLAMA_STABLECOINS_URL",
    "GITHUB_API_URL",
    "GITHUB_RAW_URL",
    "GITHUB_TOKEN",
    "REQUEST_TIMEOUT_SECONDS",
    "WEB_TIMEOUT_SECONDS",
    "MAX_RETRIES",
    "CACHE_TTL_CONFIG",
    "PRICE_HISTORY_DAYS",
    "AUDIT_LOOKBACK_MONTHS",
    "MAX_FETCH_WORKERS",
]
