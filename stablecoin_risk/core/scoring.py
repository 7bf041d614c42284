"""
Factor Scorers.

One pure function per risk factor. Each builds an unclamped score from its
base and the adjustment tables in thresholds.py, clamps exactly once at the
end, and returns a RiskFactor with a description and detail strings.

Scale: 0 (highest risk) to 5 (lowest risk).
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from ..thresholds import (
    AUDIT_SCORING,
    FACTOR_DESCRIPTIONS,
    FACTOR_NAMES,
    LIQUIDITY_SCORING,
    ORACLE_LIMITED_INFO_DESCRIPTION,
    ORACLE_SCORING,
    PEG_SCORING,
    SCORE_MAX,
    SCORE_MIN,
    TRANSPARENCY_SCORING,
)
from .models import (
    AuditRecord,
    LiquidityEntry,
    PegEvent,
    RepoActivity,
    RiskFactor,
    TransparencySignal,
)
from .peg_events import deviation_pct, summarize_peg_events


def clamp_score(score: float) -> float:
    """Clamp a score to the 0-5 scale."""
    return max(SCORE_MIN, min(SCORE_MAX, score))


def describe_score(factor_key: str, score: float) -> str:
    """Pick the description for a factor score from its ladder."""
    ladder = FACTOR_DESCRIPTIONS[factor_key]
    for minimum, description in ladder:
        if score >= minimum:
            return description
    return ladder[-1][1]


def _factor(key: str, score: float, details: Sequence[str], description: Optional[str] = None) -> RiskFactor:
    return RiskFactor(
        name=FACTOR_NAMES[key],
        score=score,
        description=description or describe_score(key, score),
        details=tuple(details),
    )


def format_usd(amount: float) -> str:
    if amount >= 1e9:
        return f"${amount / 1e9:.2f}B"
    if amount >= 1e6:
        return f"${amount / 1e6:.2f}M"
    return f"${amount / 1e3:.2f}K"


# =============================================================================
# AUDIT HISTORY
# =============================================================================

def score_audit_history(
    audits: Sequence[AuditRecord],
    repo_activity: Optional[RepoActivity] = None,
    now: Optional[datetime] = None,
    config: dict = AUDIT_SCORING,
) -> RiskFactor:
    """
    Score audit coverage: count, recency, critical/high findings and
    development activity.

    Args:
        audits: Audit records (any order)
        repo_activity: Repository activity, used for the active-development bonus
        now: Reference time for the recency window
        config: AUDIT_SCORING table
    """
    now = now or datetime.now()
    score = config["base"]

    count = len(audits)
    if count == 0:
        score += config["no_audit_penalty"]
    else:
        for rung in config["count_adjustments"]:
            if count >= rung["min_audits"]:
                score += rung["adjustment"]
                break

    cutoff = now.date() - timedelta(days=config["recent_window_days"])
    recent = sum(1 for audit in audits if audit.date >= cutoff)
    for rung in config["recent_adjustments"]:
        if recent >= rung["min_recent"]:
            score += rung["adjustment"]
            break

    critical = sum(audit.issues.critical for audit in audits)
    high = sum(audit.issues.high for audit in audits)
    score += config["critical_penalty_each"] * critical
    if high > config["high_issue_allowance"]:
        score += config["high_penalty_each"] * (high - config["high_issue_allowance"])

    if repo_activity and repo_activity.recent_commits > config["active_commit_threshold"]:
        score += config["active_development_bonus"]

    score = clamp_score(score)
    return _factor("auditHistory", score, audit_details(audits, score))


def audit_details(audits: Sequence[AuditRecord], score: float) -> List[str]:
    if not audits:
        return ["No public audits found", "Consider requesting audit information from the team"]

    latest = max(audits, key=lambda audit: audit.date)
    details = [f"Most recent audit by {latest.firm} on {latest.date.isoformat()}"]

    critical = sum(audit.issues.critical for audit in audits)
    high = sum(audit.issues.high for audit in audits)
    if critical > 0:
        details.append(f"{critical} critical issues identified across all audits")
    if high > 0:
        details.append(f"{high} high severity issues identified across all audits")

    details.append(f"{len(audits)} audits conducted in total")

    if score >= 4:
        details.append("Strong security practices demonstrated through regular audits")
    elif score <= 2.5:
        details.append("Audit frequency and coverage could be improved")
    return details


# =============================================================================
# PEG STABILITY
# =============================================================================

def score_peg_stability(peg_events: Sequence[PegEvent], config: dict = PEG_SCORING) -> RiskFactor:
    """Score peg history by max deviation, average deviation and depeg count."""
    stats = summarize_peg_events(peg_events)
    score = config["base"]

    for band in config["max_deviation_below"]:
        if stats.max_deviation_pct < band["pct"]:
            score += band["adjustment"]
            break
    else:
        for band in config["max_deviation_above"]:
            if stats.max_deviation_pct > band["pct"]:
                score += band["adjustment"]
                break

    if stats.avg_deviation_pct < config["avg_deviation_good_below"]:
        score += config["avg_deviation_good_adjustment"]
    elif stats.avg_deviation_pct > config["avg_deviation_bad_above"]:
        score += config["avg_deviation_bad_adjustment"]

    if stats.depeg_count == 0:
        score += config["no_depeg_bonus"]
    else:
        score += config["depeg_penalty_each"] * stats.depeg_count

    details = [
        f"Maximum historical deviation of {stats.max_deviation_pct:.2f}% from peg",
        f"Average deviation of {stats.avg_deviation_pct:.2f}% from peg",
        f"{stats.depeg_count} significant depeg events (>{config['depeg_threshold_pct']:g}% deviation)",
    ]
    if stats.worst_event is not None:
        worst = stats.worst_event
        details.append(
            f"Worst depeg event: {worst.date.isoformat()} with {deviation_pct(worst.price):.2f}% deviation"
        )
    else:
        details.append("No significant depeg events in analyzed history")

    return _factor("pegStability", clamp_score(score), details)


# =============================================================================
# TRANSPARENCY
# =============================================================================

def score_transparency(
    signal: Optional[TransparencySignal],
    collateral_type: str,
    config: dict = TRANSPARENCY_SCORING,
) -> RiskFactor:
    """
    Adjust the website analyzer's base score.

    A missing signal is scored as TransparencySignal.unavailable().
    """
    signal = signal or TransparencySignal.unavailable()
    score = signal.score

    if signal.has_reserves_dashboard:
        score += config["reserves_dashboard_bonus"]
    if signal.has_regular_reporting:
        score += config["regular_reporting_bonus"]
    if not signal.has_transparency_page:
        score += config["no_transparency_page_penalty"]

    # Collateral adjustments see the running score
    if collateral_type == "Fiat-backed" and score < config["fiat_backed_low_score_threshold"]:
        score += config["fiat_backed_penalty"]
    if collateral_type == "Algorithmic" and score > config["algorithmic_score_threshold"]:
        score += config["algorithmic_bonus"]

    return _factor("transparency", clamp_score(score), signal.details)


# =============================================================================
# ORACLE SETUP
# =============================================================================

def score_oracle_setup(repo_activity: Optional[RepoActivity], config: dict = ORACLE_SCORING) -> RiskFactor:
    """Score the oracle implementation hints found in the repository."""
    oracle = repo_activity.oracle if repo_activity else None
    if oracle is None:
        return _factor(
            "oracleSetup",
            clamp_score(config["no_signal_score"]),
            (
                "No public oracle implementation details found",
                "Unable to assess oracle security features",
                "Consider relying on third-party oracle audits for this stablecoin",
            ),
            description=ORACLE_LIMITED_INFO_DESCRIPTION,
        )

    score = config["base"]
    details = []

    if oracle.uses_reliable_provider:
        score += config["reliable_provider_bonus"]
        provider = (oracle.provider or "established").title()
        details.append(f"Uses {provider} price feeds for reliable data")

    if oracle.has_multiple_oracles:
        score += config["multiple_oracles_bonus"]
        details.append("Multiple independent price oracles for redundancy")
    else:
        details.append("Relies on a single oracle source")

    if oracle.has_timelock:
        score += config["timelock_bonus"]
        details.append("Timelock mechanism adds security to price updates")

    if oracle.has_price_deviation:
        score += config["price_deviation_bonus"]
        details.append("Includes price deviation checks to prevent manipulation")

    if oracle.centralized:
        score += config["centralized_penalty"]
        details.append("Centralized oracle components present security risks")
    else:
        details.append("Decentralized oracle architecture reduces central points of failure")

    return _factor("oracleSetup", clamp_score(score), details)


# =============================================================================
# LIQUIDITY
# =============================================================================

def score_liquidity(liquidity_data: Sequence[LiquidityEntry], config: dict = LIQUIDITY_SCORING) -> RiskFactor:
    """Score total circulating liquidity, chain diversity and concentration."""
    total = sum(entry.amount for entry in liquidity_data)
    top = max(liquidity_data, key=lambda entry: entry.amount) if liquidity_data else None
    top_pct = (top.amount / total) * 100 if top is not None and total > 0 else 0.0
    chain_count = len(liquidity_data)

    score = config["base"]

    for tier in config["total_tiers"]:
        if total >= tier["min_usd"]:
            score += tier["adjustment"]
            break
    else:
        # Both low-end penalties apply below the very-low threshold
        if total < config["low_liquidity_usd"]:
            score += config["low_liquidity_adjustment"]
        if total < config["very_low_liquidity_usd"]:
            score += config["very_low_liquidity_adjustment"]

    if chain_count >= config["diverse_chain_count"]:
        score += config["diverse_chain_adjustment"]
    elif chain_count <= config["single_chain_count"]:
        score += config["single_chain_adjustment"]

    for band in config["concentration_bands"]:
        if top_pct > band["above_pct"]:
            score += band["adjustment"]
            break
    else:
        if top_pct < config["distributed_below_pct"]:
            score += config["distributed_adjustment"]

    details = [f"Total liquidity of {format_usd(total)} across {chain_count} chains"]
    if top is not None:
        details.append(f"{top_pct:.1f}% of liquidity concentrated on {top.chain}")
    if top_pct > 90:
        details.append("High concentration risk with majority on a single chain")
    elif top_pct < 50 and chain_count >= 3:
        details.append("Well-distributed liquidity across multiple chains")
    if total > 1e9:
        details.append("High trading volume supports market stability")
    elif total < 100e6:
        details.append("Lower liquidity may lead to higher slippage on larger trades")

    return _factor("liquidity", clamp_score(score), details)
