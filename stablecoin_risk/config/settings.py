"""
Stablecoin risk engine configuration.

API endpoints, credentials, timeouts and cache lifetimes.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Market data provider (CoinGecko). The pro header is only sent when a key is set.
COINGECKO_API_URL = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY")

# On-chain liquidity aggregator (DefiLlama stablecoins API, no auth)
DEFILLAMA_STABLECOINS_URL = os.getenv("DEFILLAMA_STABLECOINS_URL", "https://stablecoins.llama.fi")

# Source code host
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
GITHUB_RAW_URL = os.getenv("GITHUB_RAW_URL", "https://raw.githubusercontent.com")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")

# Request timeouts (seconds). API calls wait longer than issuer websites.
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 10))
WEB_TIMEOUT_SECONDS = float(os.getenv("WEB_TIMEOUT_SECONDS", 5))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", 3))
MAX_RETRY_AFTER_SECONDS = float(os.getenv("MAX_RETRY_AFTER_SECONDS", 60))

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Cache lifetimes (seconds)
CACHE_TTL_CONFIG = {
    "risk_report": 3600,      # fully assembled report
    "coin_info": 86400,       # coin identity / detail
    "peg_events": 86400,      # peg analysis
    "liquidity": 3600,        # chain distribution
    "audit_history": 3600,    # audit mining
    "repo_activity": 86400,   # commits, contributors, oracle signal
    "github_url": 86400,
    "transparency": 86400,    # issuer website scrape
}

# Analysis windows
PRICE_HISTORY_DAYS = int(os.getenv("PRICE_HISTORY_DAYS", 365))
AUDIT_LOOKBACK_MONTHS = int(os.getenv("AUDIT_LOOKBACK_MONTHS", 8))
MAX_AUDIT_FILES = int(os.getenv("MAX_AUDIT_FILES", 25))

# Fan-out pool size for the per-request fetches
MAX_FETCH_WORKERS = int(os.getenv("MAX_FETCH_WORKERS", 6))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()
