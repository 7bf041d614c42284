"""
Native-Token Resolver.

Several coins in the market-data catalogue can share a ticker: the native
issuance plus bridged or wrapped copies on other chains. The resolver scores
every same-ticker candidate and picks the most likely native deployment.

Disqualification is an ordered list of rules; the first rule that returns a
reason wins and the candidate is scored at the disqualification floor.
Surviving candidates accumulate a weighted score from chain presence,
naming, identifier shape and market-cap rank.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..thresholds import RESOLVER_CONFIG
from .exceptions import NOT_FOUND_REASON, ONLY_BRIDGED_REASON, TokenNotFoundError
from .logging_utils import get_logger
from .models import CoinCandidate, NativeTokenResolution

logger = get_logger(__name__)

DisqualificationRule = Callable[[CoinCandidate, dict], Optional[str]]


def _combined_text(candidate: CoinCandidate) -> str:
    parts = [candidate.name, candidate.id, candidate.symbol] + list(candidate.chains)
    return " ".join(part for part in parts if part).lower()


# =============================================================================
# DISQUALIFICATION RULES
# =============================================================================

def rule_bridge_keyword(candidate: CoinCandidate, config: dict) -> Optional[str]:
    """Name, id, symbol or platform list mentions a bridge or wrapper."""
    text = _combined_text(candidate)
    for keyword in tuple(config["bridge_keywords"]) + tuple(config["bridge_protocols"]):
        if keyword in text:
            return f"bridge indicator '{keyword}'"
    return None


def rule_no_platform(candidate: CoinCandidate, config: dict) -> Optional[str]:
    """No deployment at all, unless the coin is itself a known native chain asset."""
    if not candidate.chains and candidate.id not in config["native_chain_weights"]:
        return "no platform deployments"
    return None


def rule_too_many_chains(candidate: CoinCandidate, config: dict) -> Optional[str]:
    chain_count = len(candidate.chains)
    if chain_count > config["max_native_chains"]:
        return f"deployed on {chain_count} chains"
    return None


DISQUALIFICATION_RULES: Tuple[DisqualificationRule, ...] = (
    rule_bridge_keyword,
    rule_no_platform,
    rule_too_many_chains,
)


def disqualification_reason(
    candidate: CoinCandidate,
    config: dict = RESOLVER_CONFIG,
    rules: Sequence[DisqualificationRule] = DISQUALIFICATION_RULES,
) -> Optional[str]:
    """Return the first matching disqualification reason, or None."""
    for rule in rules:
        reason = rule(candidate, config)
        if reason is not None:
            return reason
    return None


# =============================================================================
# SCORING
# =============================================================================

def score_candidate(candidate: CoinCandidate, config: dict = RESOLVER_CONFIG) -> float:
    """Score one candidate; disqualified candidates get the floor score."""
    reason = disqualification_reason(candidate, config)
    if reason is not None:
        logger.debug("candidate_disqualified", coin_id=candidate.id, reason=reason)
        return config["disqualified_score"]

    score = 0.0
    chains = set(candidate.chains)
    weights = config["native_chain_weights"]
    identity = f"{candidate.id} {candidate.name}".lower()

    for chain, weight in weights.items():
        if chain in chains:
            score += weight

    for chain, keywords in config["chain_naming_keywords"].items():
        if chain in chains and any(keyword in identity for keyword in keywords):
            score += config["naming_bonus"]

    coin_id = candidate.id.lower()
    if len(coin_id) <= config["simple_id_max_length"] and re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)?", coin_id):
        score += config["simple_id_bonus"]

    if candidate.symbol.lower() == coin_id:
        score += config["symbol_id_bonus"]

    if candidate.market_cap_rank:
        score += config["rank_bonus_scale"] / candidate.market_cap_rank

    return score


def filter_by_ticker(candidates: Iterable[CoinCandidate], ticker: str) -> List[CoinCandidate]:
    ticker = ticker.strip().lower()
    return [c for c in candidates if c.symbol.lower() == ticker]


def rank_candidates(
    candidates: Sequence[CoinCandidate],
    config: dict = RESOLVER_CONFIG,
) -> List[Tuple[CoinCandidate, float]]:
    """Score and sort candidates descending; listing order breaks ties."""
    scored = [(candidate, score_candidate(candidate, config)) for candidate in candidates]
    # sorted() is stable, so first-seen wins on equal scores
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def resolve_native_token(
    candidates: Iterable[CoinCandidate],
    ticker: str,
    config: dict = RESOLVER_CONFIG,
) -> NativeTokenResolution:
    """
    Pick the canonical deployment for a ticker.

    Args:
        candidates: Full coin catalogue (or any subset of it)
        ticker: Symbol to resolve, matched case-insensitively
        config: Resolver tables (bridge keywords, chain weights, bonuses)

    Returns:
        NativeTokenResolution with the winner and the rejected bridges

    Raises:
        TokenNotFoundError: reason "not found" when nothing matches the ticker,
            "only bridged versions found" when every match is disqualified
    """
    matches = filter_by_ticker(candidates, ticker)
    if not matches:
        raise TokenNotFoundError(ticker, NOT_FOUND_REASON)

    ranked = rank_candidates(matches, config)
    floor = config["disqualified_score"]
    eligible = [(c, s) for c, s in ranked if s > floor]
    rejected = tuple(c for c, s in ranked if s <= floor)

    if not eligible:
        logger.info("only_bridged_candidates", ticker=ticker, candidates=len(matches))
        raise TokenNotFoundError(ticker, ONLY_BRIDGED_REASON)

    selected, score = eligible[0]
    logger.debug(
        "native_token_resolved",
        ticker=ticker,
        coin_id=selected.id,
        score=round(score, 3),
        rejected=len(rejected),
    )
    return NativeTokenResolution(selected=selected, score=score, rejected_bridges=rejected)


def describe_candidates(candidates: Sequence[CoinCandidate], config: dict = RESOLVER_CONFIG) -> List[Dict]:
    """Score breakdown for every candidate, useful for the dashboard."""
    return [
        {
            "id": candidate.id,
            "name": candidate.name,
            "chains": candidate.chains,
            "score": score,
            "disqualified_reason": disqualification_reason(candidate, config),
        }
        for candidate, score in rank_candidates(candidates, config)
    ]
