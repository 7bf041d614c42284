"""Core risk engine components."""

from .exceptions import (
    StablecoinRiskError,
    TokenNotFoundError,
    RateLimitedError,
    AdapterTimeoutError,
    ProviderError,
    AnalysisFailedError,
)

from .models import (
    CoinCandidate,
    NativeTokenResolution,
    CoinInfo,
    PriceSample,
    PegEvent,
    IssueCounts,
    AuditRecord,
    RepoFile,
    LiquidityEntry,
    OracleSignal,
    RepoActivity,
    ReserveHolding,
    TransparencySignal,
    RiskFactor,
    RiskReport,
)

from .resolver import resolve_native_token, score_candidate, disqualification_reason

from .peg_events import extract_peg_events, summarize_peg_events

from .audit_history import extract_audit_history, infer_firm

from .scoring import (
    clamp_score,
    score_audit_history,
    score_peg_stability,
    score_transparency,
    score_oracle_setup,
    score_liquidity,
)

from .aggregator import (
    calculate_total_score,
    classify_risk_tier,
    generate_risk_summary,
    build_risk_report,
)

from .cache import TTLCache, clear_all_caches

from .service import analyze_stablecoin, error_response

__all__ = [
    # Errors
    "StablecoinRiskError",
    "TokenNotFoundError",
    "RateLimitedError",
    "AdapterTimeoutError",
    "ProviderError",
    "AnalysisFailedError",
    # Models
    "CoinCandidate",
    "NativeTokenResolution",
    "CoinInfo",
    "PriceSample",
    "PegEvent",
    "IssueCounts",
    "AuditRecord",
    "RepoFile",
    "LiquidityEntry",
    "OracleSignal",
    "RepoActivity",
    "ReserveHolding",
    "TransparencySignal",
    "RiskFactor",
    "RiskReport",
    # Resolver
    "resolve_native_token",
    "score_candidate",
    "disqualification_reason",
    # Extractors
    "extract_peg_events",
    "summarize_peg_events",
    "extract_audit_history",
    "infer_firm",
    # Scoring
    "clamp_score",
    "score_audit_history",
    "score_peg_stability",
    "score_transparency",
    "score_oracle_setup",
    "score_liquidity",
    # Aggregator
    "calculate_total_score",
    "classify_risk_tier",
    "generate_risk_summary",
    "build_risk_report",
    # Cache
    "TTLCache",
    "clear_all_caches",
    # Service
    "analyze_stablecoin",
    "error_response",
]
