"""
Liquidity Fetcher - DefiLlama stablecoins adapter.

Liquidity is measured as the current on-chain circulating supply (pegged
USD) per chain, taken from the `chainCirculating` breakdown of the
/stablecoins endpoint. Exchange trading volume is not used.
"""

from typing import Any, Dict, List, Optional

import pandas as pd

from ..config.settings import DEFILLAMA_STABLECOINS_URL
from ..core.exceptions import TokenNotFoundError
from ..core.logging_utils import get_logger
from ..core.models import LiquidityEntry
from .http import get_json

logger = get_logger(__name__)

PROVIDER = "DefiLlama"


def _circulating_usd(entry: Optional[Dict[str, Any]]) -> float:
    current = (entry or {}).get("current") or {}
    return float(current.get("peggedUSD") or 0.0)


def select_pegged_asset(assets: List[Dict[str, Any]], ticker: str, coin_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Pick the asset for a ticker: an exact gecko_id match first, otherwise
    the same-symbol asset with the largest circulating supply.
    """
    if coin_id:
        for asset in assets:
            if asset.get("gecko_id") == coin_id:
                return asset

    ticker = ticker.lower()
    matches = [a for a in assets if (a.get("symbol") or "").lower() == ticker]
    if not matches:
        return None
    return max(matches, key=lambda a: _circulating_usd({"current": a.get("circulating")}))


def chain_distribution(asset: Dict[str, Any]) -> List[LiquidityEntry]:
    """Per-chain circulating supply, largest first, zero balances dropped."""
    rows = [
        {"chain": chain, "amount": _circulating_usd(entry)}
        for chain, entry in (asset.get("chainCirculating") or {}).items()
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    df = df[df["amount"] > 0].sort_values("amount", ascending=False, kind="mergesort")
    return [LiquidityEntry(chain=row.chain, amount=float(row.amount)) for row in df.itertuples(index=False)]


def fetch_chain_distribution(ticker: str, coin_id: Optional[str] = None) -> List[LiquidityEntry]:
    """
    Fetch the per-chain circulating supply for a stablecoin.

    Args:
        ticker: Stablecoin symbol
        coin_id: CoinGecko id, used to disambiguate same-symbol assets

    Raises:
        TokenNotFoundError: DefiLlama does not track the stablecoin
    """
    data = get_json(f"{DEFILLAMA_STABLECOINS_URL}/stablecoins", PROVIDER, params={"includePrices": "false"})
    asset = select_pegged_asset((data or {}).get("peggedAssets") or [], ticker, coin_id)
    if asset is None:
        raise TokenNotFoundError(ticker)

    entries = chain_distribution(asset)
    logger.debug("chain_distribution_fetched", ticker=ticker, chains=len(entries))
    return entries
