"""
Stablecoin risk scoring engine.

Resolves a ticker to its native deployment, gathers market, liquidity,
repository and website signals, and scores five risk factors into a
weighted 0-5 RiskReport (5 = lowest risk).

    from stablecoin_risk import analyze_stablecoin
    report = analyze_stablecoin("USDC")
    print(report.total_score, report.summary)
"""

__version__ = "1.0.0"

from .core import (
    RiskReport,
    StablecoinRiskError,
    analyze_stablecoin,
    build_risk_report,
    clear_all_caches,
    error_response,
)

__all__ = [
    "__version__",
    "RiskReport",
    "StablecoinRiskError",
    "analyze_stablecoin",
    "build_risk_report",
    "clear_all_caches",
    "error_response",
]
