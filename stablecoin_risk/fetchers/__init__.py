"""
Data provider adapters.

Each adapter wraps one upstream and returns engine model objects:

- market: CoinGecko catalogue, coin detail and daily prices
- liquidity: DefiLlama per-chain circulating supply
- github: repository files, activity and oracle signal
- website: issuer transparency scraping
"""

from .market import (
    list_candidates,
    fetch_market_cap_ranks,
    fetch_coin_detail,
    fetch_daily_prices,
    determine_collateral_type,
    determine_blockchain,
)

from .liquidity import fetch_chain_distribution

from .github import (
    parse_repo_url,
    find_github_url,
    list_repo_files,
    fetch_repo_activity,
    detect_oracle_signal,
)

from .website import check_transparency, TransparencyScraper

__all__ = [
    # Market
    "list_candidates",
    "fetch_market_cap_ranks",
    "fetch_coin_detail",
    "fetch_daily_prices",
    "determine_collateral_type",
    "determine_blockchain",
    # Liquidity
    "fetch_chain_distribution",
    # GitHub
    "parse_repo_url",
    "find_github_url",
    "list_repo_files",
    "fetch_repo_activity",
    "detect_oracle_signal",
    # Website
    "check_transparency",
    "TransparencyScraper",
]
