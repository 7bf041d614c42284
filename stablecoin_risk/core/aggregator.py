"""
Aggregator: weighted total score, narrative summary and report assembly.
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..thresholds import ADDITIONAL_COMMENTARY, FACTOR_WEIGHTS, RISK_TIERS
from .models import (
    AuditRecord,
    CoinInfo,
    LiquidityEntry,
    PegEvent,
    RepoActivity,
    RiskFactor,
    RiskReport,
    TransparencySignal,
)
from .scoring import (
    score_audit_history,
    score_liquidity,
    score_oracle_setup,
    score_peg_stability,
    score_transparency,
)


def calculate_total_score(factors: Mapping[str, RiskFactor], weights: dict = FACTOR_WEIGHTS) -> float:
    """Weighted sum of the factor scores."""
    return sum(factors[key].score * entry["weight"] for key, entry in weights.items())


def classify_risk_tier(total_score: float) -> str:
    for minimum, tier in RISK_TIERS:
        if total_score >= minimum:
            return tier
    return RISK_TIERS[-1][1]


def additional_commentary(total_score: float) -> str:
    for minimum, sentence in ADDITIONAL_COMMENTARY:
        if total_score >= minimum:
            return sentence
    return ADDITIONAL_COMMENTARY[-1][1]


def generate_risk_summary(
    name: str,
    total_score: float,
    factors: Mapping[str, RiskFactor],
    weights: dict = FACTOR_WEIGHTS,
) -> str:
    """
    One-paragraph narrative: risk tier, two strongest factors, weakest factor
    and a closing sentence chosen by the total score.

    Ties keep the FACTOR_WEIGHTS order.
    """
    labelled = [(weights[key]["label"], factors[key].score) for key in weights]
    strongest = sorted(labelled, key=lambda item: item[1], reverse=True)[:2]
    weakest = sorted(labelled, key=lambda item: item[1])[0]

    strengths = " and ".join(label for label, _ in strongest)
    return (
        f"{name} is a {classify_risk_tier(total_score)} stablecoin with strong {strengths}. "
        f"Its key challenge is in its {weakest[0]}. "
        f"{additional_commentary(total_score)}"
    )


def build_risk_report(
    coin_info: CoinInfo,
    *,
    peg_events: Sequence[PegEvent],
    audit_history: Sequence[AuditRecord],
    liquidity_data: Sequence[LiquidityEntry],
    repo_activity: Optional[RepoActivity],
    transparency: Optional[TransparencySignal],
    now: Optional[datetime] = None,
) -> RiskReport:
    """
    Score every factor and assemble the RiskReport.

    Deterministic given its inputs; `now` pins the audit recency window.
    """
    factors = {
        "auditHistory": score_audit_history(audit_history, repo_activity, now=now),
        "pegStability": score_peg_stability(peg_events),
        "transparency": score_transparency(transparency, coin_info.collateral_type),
        "oracleSetup": score_oracle_setup(repo_activity),
        "liquidity": score_liquidity(liquidity_data),
    }
    total_score = calculate_total_score(factors)

    return RiskReport(
        coin_info=coin_info,
        total_score=total_score,
        summary=generate_risk_summary(coin_info.name, total_score, factors),
        factors=factors,
        peg_events=tuple(peg_events),
        audit_history=tuple(audit_history),
        liquidity_data=tuple(liquidity_data),
        transparency=transparency,
    )
