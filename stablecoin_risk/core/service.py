"""
Risk Report Service - per-ticker orchestration.

analyze_stablecoin(ticker) runs the pipeline:

1. Report cache lookup (keyed by lowercased ticker)
2. Identity (critical): catalogue -> native-token resolution -> coin detail
3. Concurrent fan-out of the remaining signals:
   - peg events (critical)
   - transparency (critical)
   - liquidity (non-critical, degrades to [])
   - repository analysis: files, activity, audits (non-critical, degrades
     to no activity and no audits)
4. Scoring and report assembly, then cache

Critical failures after identity resolution raise AnalysisFailedError.
Identity failures propagate unchanged (TokenNotFoundError,
RateLimitedError, AdapterTimeoutError).
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..config.settings import MAX_FETCH_WORKERS
from ..fetchers import github, liquidity, market, website
from .aggregator import build_risk_report
from .audit_history import extract_audit_history
from .cache import get_cache
from .exceptions import (
    AdapterTimeoutError,
    AnalysisFailedError,
    RateLimitedError,
    StablecoinRiskError,
    TokenNotFoundError,
)
from .logging_utils import bind_ticker, get_logger
from .models import AuditRecord, CoinInfo, LiquidityEntry, PegEvent, RepoActivity, RiskReport, TransparencySignal
from .peg_events import extract_peg_events
from .resolver import filter_by_ticker, resolve_native_token

logger = get_logger(__name__)

CRITICAL_SIGNALS = ("peg_events", "transparency")


# =============================================================================
# IDENTITY
# =============================================================================

def resolve_coin_info(ticker: str, use_cache: bool = True) -> CoinInfo:
    """
    Resolve a ticker to the native coin's CoinInfo.

    Raises:
        TokenNotFoundError: no match, or only bridged matches
        RateLimitedError / AdapterTimeoutError: provider failures
    """
    cache = get_cache("coin_info")
    if use_cache:
        cached = cache.get(ticker)
        if cached is not None:
            return cached

    candidates = filter_by_ticker(market.list_candidates(), ticker)
    if not candidates:
        raise TokenNotFoundError(ticker)

    try:
        ranks = market.fetch_market_cap_ranks([c.id for c in candidates])
    except StablecoinRiskError as e:
        logger.warning("market_cap_ranks_unavailable", ticker=ticker, error=str(e))
        ranks = {}
    candidates = [replace(c, market_cap_rank=ranks.get(c.id, c.market_cap_rank)) for c in candidates]

    resolution = resolve_native_token(candidates, ticker)
    coin_info = market.fetch_coin_detail(resolution.selected.id)
    cache.set(ticker, coin_info)
    return coin_info


# =============================================================================
# SIGNALS
# =============================================================================

def load_peg_events(coin_id: str, use_cache: bool = True) -> List[PegEvent]:
    cache = get_cache("peg_events")
    events = cache.get(coin_id) if use_cache else None
    if events is None:
        events = extract_peg_events(market.fetch_daily_prices(coin_id))
        cache.set(coin_id, events)
    return events


def load_liquidity(ticker: str, coin_id: str, use_cache: bool = True) -> List[LiquidityEntry]:
    cache = get_cache("liquidity")
    entries = cache.get(ticker) if use_cache else None
    if entries is None:
        entries = liquidity.fetch_chain_distribution(ticker, coin_id)
        cache.set(ticker, entries)
    return entries


def load_transparency(coin_info: CoinInfo, use_cache: bool = True) -> TransparencySignal:
    cache = get_cache("transparency")
    signal = cache.get(coin_info.id) if use_cache else None
    if signal is None:
        signal = website.check_transparency(coin_info.website)
        cache.set(coin_info.id, signal)
    return signal


def load_repo_analysis(
    coin_info: CoinInfo,
    use_cache: bool = True,
    now: Optional[datetime] = None,
) -> Tuple[Optional[RepoActivity], List[AuditRecord]]:
    """
    Repository activity and audit history for a coin.

    Each step degrades on its own: no repository gives (None, []), a failed
    listing still allows activity, a failed activity call still allows audits.
    """
    url_cache = get_cache("github_url")
    repo_url = url_cache.get(coin_info.id) if use_cache else None
    if repo_url is None:
        repo_url = github.find_github_url(coin_info.website, coin_info)
        url_cache.set(coin_info.id, repo_url)
    if not repo_url:
        logger.info("no_repository_found", coin_id=coin_info.id)
        return None, []

    activity_cache = get_cache("repo_activity")
    audit_cache = get_cache("audit_history")
    activity = activity_cache.get(repo_url) if use_cache else None
    audits = audit_cache.get(repo_url) if use_cache else None
    if activity is not None and audits is not None:
        return activity, audits

    try:
        files = github.list_repo_files(repo_url)
    except (StablecoinRiskError, ValueError) as e:
        logger.warning("repo_listing_failed", repo=repo_url, error=str(e))
        files = []

    if activity is None:
        try:
            activity = github.fetch_repo_activity(repo_url, files)
            activity_cache.set(repo_url, activity)
        except (StablecoinRiskError, ValueError) as e:
            logger.warning("repo_activity_failed", repo=repo_url, error=str(e))

    if audits is None:
        audits = extract_audit_history(repo_url, files, now=now)
        if files:
            audit_cache.set(repo_url, audits)

    return activity, audits


# =============================================================================
# ORCHESTRATION
# =============================================================================

def gather_signals(
    ticker: str,
    coin_info: CoinInfo,
    use_cache: bool = True,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Fetch every post-identity signal concurrently.

    Raises:
        AnalysisFailedError: a critical signal (peg events, transparency) failed
    """
    jobs = {
        "peg_events": lambda: load_peg_events(coin_info.id, use_cache),
        "transparency": lambda: load_transparency(coin_info, use_cache),
        "liquidity": lambda: load_liquidity(ticker, coin_info.id, use_cache),
        "repo": lambda: load_repo_analysis(coin_info, use_cache, now),
    }
    degraded = {"liquidity": [], "repo": (None, [])}
    results: Dict[str, Any] = {}

    # Not a `with` block: exiting one would wait for running jobs before a
    # critical failure could surface.
    executor = ThreadPoolExecutor(max_workers=MAX_FETCH_WORKERS)
    try:
        futures = {executor.submit(job): name for name, job in jobs.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except Exception as e:
                if name in CRITICAL_SIGNALS:
                    logger.error("critical_signal_failed", ticker=ticker, signal=name, error=str(e))
                    raise AnalysisFailedError(
                        "Failed to analyze stablecoin data",
                        "Error fetching price stability or transparency information",
                    ) from e
                logger.warning("signal_degraded", ticker=ticker, signal=name, error=str(e))
                results[name] = degraded[name]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return results


def analyze_stablecoin(ticker: str, use_cache: bool = True, now: Optional[datetime] = None) -> RiskReport:
    """
    Build (or return the cached) RiskReport for a ticker.

    Args:
        ticker: Stablecoin symbol, case-insensitive
        use_cache: Read cached results; fresh results are always written back
        now: Reference time for the audit windows

    Raises:
        TokenNotFoundError, RateLimitedError, AdapterTimeoutError, AnalysisFailedError
    """
    ticker = ticker.strip()
    log = bind_ticker(ticker)
    report_cache = get_cache("risk_report")
    if use_cache:
        cached = report_cache.get(ticker)
        if cached is not None:
            log.debug("risk_report_cache_hit")
            return cached

    coin_info = resolve_coin_info(ticker, use_cache)
    log.info("coin_resolved", coin_id=coin_info.id, collateral_type=coin_info.collateral_type)

    signals = gather_signals(ticker, coin_info, use_cache, now)
    activity, audits = signals["repo"]

    report = build_risk_report(
        coin_info,
        peg_events=signals["peg_events"],
        audit_history=audits,
        liquidity_data=signals["liquidity"],
        repo_activity=activity,
        transparency=signals["transparency"],
        now=now,
    )
    report_cache.set(ticker, report)
    log.info("risk_report_built", total_score=round(report.total_score, 2))
    return report


def error_response(exc: Exception) -> Tuple[int, Dict[str, str]]:
    """Map an exception to (status code, {"message", "details"}) for callers."""
    if isinstance(exc, TokenNotFoundError):
        if exc.only_bridged:
            return 404, {
                "message": f"Stablecoin {exc.ticker} not found: only bridged versions found",
                "details": "Only bridged or wrapped deployments match this ticker",
            }
        return 404, {
            "message": f"Stablecoin {exc.ticker} not found in CoinGecko database",
            "details": "Please verify the ticker symbol and try again",
        }
    if isinstance(exc, RateLimitedError):
        return 429, {
            "message": "Rate limit exceeded",
            "details": "Too many requests. Please try again in a few minutes",
        }
    if isinstance(exc, AdapterTimeoutError):
        return 504, {
            "message": "Request timeout",
            "details": "The request took too long to complete. Please try again",
        }
    if isinstance(exc, AnalysisFailedError):
        return 500, {"message": str(exc), "details": exc.details}
    return 500, {
        "message": "Failed to analyze stablecoin data",
        "details": "An unexpected error occurred",
    }
