"""
Market Fetcher - CoinGecko adapter.

Provides:
- list_candidates(): full coin catalogue with platform deployments
- fetch_market_cap_ranks(ids): market-cap rank for a handful of coins
- fetch_coin_detail(coin_id): CoinInfo for the resolved coin
- fetch_daily_prices(coin_id, days): daily USD price samples
"""

from typing import Any, Dict, List, Sequence

from ..config.settings import COINGECKO_API_KEY, COINGECKO_API_URL, PRICE_HISTORY_DAYS
from ..core.exceptions import ProviderError, TokenNotFoundError
from ..core.logging_utils import get_logger
from ..core.models import CoinCandidate, CoinInfo, PriceSample
from ..core.peg_events import samples_from_market_chart
from .http import get_json

logger = get_logger(__name__)

PROVIDER = "CoinGecko"

PLATFORM_NAMES = {
    "ethereum": "Ethereum",
    "binance-smart-chain": "BSC",
    "solana": "Solana",
    "polygon-pos": "Polygon",
    "avalanche": "Avalanche",
    "tron": "Tron",
    "arbitrum-one": "Arbitrum",
    "optimistic-ethereum": "Optimism",
}


def _headers() -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if COINGECKO_API_KEY:
        headers["x-cg-pro-api-key"] = COINGECKO_API_KEY
    return headers


def _get(path: str, params: Dict[str, Any] = None) -> Any:
    return get_json(f"{COINGECKO_API_URL}{path}", PROVIDER, params=params, headers=_headers())


def list_candidates() -> List[CoinCandidate]:
    """Every coin in the catalogue, with its platform deployments."""
    data = _get("/coins/list", {"include_platform": "true"})
    candidates = [CoinCandidate.from_api(item) for item in data or []]
    logger.debug("coin_list_fetched", count=len(candidates))
    return candidates


def fetch_market_cap_ranks(coin_ids: Sequence[str]) -> Dict[str, int]:
    """Market-cap rank per coin id; coins without a rank are omitted."""
    if not coin_ids:
        return {}
    data = _get("/coins/markets", {"vs_currency": "usd", "ids": ",".join(coin_ids)})
    return {
        item["id"]: item["market_cap_rank"]
        for item in data or []
        if item.get("market_cap_rank")
    }


def determine_collateral_type(description: str, categories: Sequence[str] = ()) -> str:
    """Classify backing from the provider's description text and categories."""
    text = (description or "").lower()
    if "fiat" in text or "usd backed" in text:
        return "Fiat-backed"
    if "algorithm" in text or "algorithmic-stablecoin" in (categories or ()):
        return "Algorithmic"
    if "crypto" in text or "collateral" in text:
        return "Crypto-backed"
    return "Unknown"


def determine_blockchain(platforms: Dict[str, str]) -> str:
    chains = [chain for chain in (platforms or {}) if chain]
    if not chains:
        return "Unknown"
    if len(chains) > 1:
        return "Multi-chain"
    return PLATFORM_NAMES.get(chains[0], chains[0])


def select_price_feed(tickers: Sequence[Dict[str, Any]]) -> str:
    """Highest-volume trusted USD market, or '' when none."""
    trusted = [
        t for t in tickers or []
        if t.get("target") == "USD" and t.get("trust_score") == "green"
    ]
    if not trusted:
        return ""
    best = max(trusted, key=lambda t: t.get("volume") or 0)
    return (best.get("market") or {}).get("identifier", "")


def coin_info_from_detail(data: Dict[str, Any]) -> CoinInfo:
    """Build CoinInfo from a /coins/{id} payload."""
    links = data.get("links") or {}
    full_description = (data.get("description") or {}).get("en") or ""
    homepages = [url for url in links.get("homepage") or [] if url]
    repos = [url for url in (links.get("repos_url") or {}).get("github") or [] if url]

    return CoinInfo(
        id=data.get("id", ""),
        name=data.get("name", ""),
        symbol=(data.get("symbol") or "").upper(),
        logo=(data.get("image") or {}).get("large"),
        description=full_description.split(".")[0],
        website=homepages[0] if homepages else "",
        github=repos[0].rstrip("/") if repos else "",
        market_cap=float(((data.get("market_data") or {}).get("market_cap") or {}).get("usd") or 0),
        launch_date=data.get("genesis_date") or "Unknown",
        collateral_type=determine_collateral_type(full_description, data.get("categories") or ()),
        blockchain=determine_blockchain(data.get("platforms") or {}),
        price_feed=select_price_feed(data.get("tickers")),
    )


def fetch_coin_detail(coin_id: str) -> CoinInfo:
    """
    Fetch identity details for a resolved coin.

    Raises:
        TokenNotFoundError: the provider has no such coin id
        ProviderError: 403 (bad API key) or another upstream failure
    """
    params = {
        "localization": "false",
        "tickers": "true",
        "market_data": "true",
        "community_data": "false",
        "developer_data": "false",
        "sparkline": "false",
    }
    try:
        data = _get(f"/coins/{coin_id}", params)
    except ProviderError as e:
        if e.status_code == 404:
            raise TokenNotFoundError(coin_id) from e
        if e.status_code == 403:
            raise ProviderError(PROVIDER, "Invalid or missing CoinGecko API key", status_code=403) from e
        raise
    return coin_info_from_detail(data)


def fetch_daily_prices(coin_id: str, days: int = PRICE_HISTORY_DAYS) -> List[PriceSample]:
    """Daily USD closing prices, ascending by date."""
    data = _get(
        f"/coins/{coin_id}/market_chart",
        {"vs_currency": "usd", "days": days, "interval": "daily"},
    )
    samples = samples_from_market_chart((data or {}).get("prices") or [])
    logger.debug("price_history_fetched", coin_id=coin_id, samples=len(samples))
    return samples
