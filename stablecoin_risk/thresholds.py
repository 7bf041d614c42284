"""
Stablecoin Risk Scoring Thresholds and Justifications.

Every table used by the resolver, the extractors and the factor scorers lives
here as read-only configuration. Scores use a 0-5 scale where 5 is the
lowest risk.

Each scoring entry includes:
- value / adjustment: The numeric threshold or score delta
- justification: Why the threshold was chosen
"""

# =============================================================================
# SCORE SCALE
# =============================================================================

SCORE_MIN = 0.0
SCORE_MAX = 5.0

# =============================================================================
# FACTOR WEIGHTS
# =============================================================================

FACTOR_WEIGHTS = {
    "auditHistory": {
        "weight": 0.25,
        "label": "audit history",
        "justification": "Smart contract failures are the most common cause of total loss. "
                        "Recent independent audits are the strongest public signal of code quality.",
    },
    "pegStability": {
        "weight": 0.25,
        "label": "peg stability",
        "justification": "Holding the $1.00 peg is the core value proposition of a stablecoin. "
                        "Historical deviations are direct evidence of redemption stress.",
    },
    "transparency": {
        "weight": 0.20,
        "label": "transparency",
        "justification": "Reserve disclosures and proof of reserves let holders verify backing. "
                        "Weighted slightly below code and peg because disclosures are self-reported.",
    },
    "oracleSetup": {
        "weight": 0.15,
        "label": "oracle setup",
        "justification": "Oracle manipulation drives many DeFi exploits, but only matters for "
                        "designs that consume on-chain prices (crypto-backed, algorithmic).",
    },
    "liquidity": {
        "weight": 0.15,
        "label": "liquidity",
        "justification": "Deep, well-distributed supply allows exits without slippage. "
                        "Secondary to solvency but essential during a depeg.",
    },
}

FACTOR_NAMES = {
    "auditHistory": "Audit History",
    "pegStability": "Peg Stability",
    "transparency": "Transparency",
    "oracleSetup": "Oracle Setup",
    "liquidity": "Liquidity Depth",
}

# =============================================================================
# NATIVE TOKEN RESOLUTION
# =============================================================================

RESOLVER_CONFIG = {
    "disqualified_score": -1000.0,
    # Substrings marking a bridged or wrapped representation. Chain suffixes are
    # hyphen-prefixed so platform ids such as "polygon-pos" do not match.
    "bridge_keywords": (
        "bridged",
        "wrapped",
        "binance-peg",
        "-bsc",
        "-bnb",
        "-polygon",
        "-avalanche",
        "-arbitrum",
        "-optimism",
        "-fantom",
        "-harmony",
        "-heco",
        "-celo",
        "(pos)",
        ".e",
    ),
    "bridge_protocols": (
        "wormhole",
        "multichain",
        "anyswap",
        "celer",
        "axelar",
        "stargate",
        "layerzero",
        "allbridge",
        "synapse",
        "hop protocol",
        "portal",
    ),
    "max_native_chains": 3,
    "native_chain_weights": {
        "ethereum": 3.0,
        "tron": 2.0,
        "solana": 2.0,
        "binance-smart-chain": 1.0,
        "base": 0.5,
        "arbitrum-one": 0.5,
        "polygon-pos": 0.5,
        "avalanche": 0.5,
        "optimistic-ethereum": 0.5,
    },
    "chain_naming_keywords": {
        "ethereum": ("erc20", "eth"),
        "tron": ("trc20", "tron"),
        "solana": ("spl", "solana"),
        "binance-smart-chain": ("bep20",),
    },
    "naming_bonus": 0.5,
    "simple_id_max_length": 15,
    "simple_id_bonus": 1.0,
    "symbol_id_bonus": 1.5,
    "rank_bonus_scale": 5.0,
}

# =============================================================================
# PEG EVENTS
# =============================================================================

PEG_EVENT_FILTER = {
    "significant_deviation": 0.002,   # fraction of peg (0.2%)
    "edge_samples": 3,                # first/last N samples are always kept
    "window_half_width": 3,           # 7-sample centred window
    "bucket_days": 7,                 # day-of-month // 7 bucketing
}

# Evaluated top to bottom; first match wins. Boundaries go to the more severe bucket.
PEG_EVENT_LADDER = (
    {"min_deviation_pct": 5.0, "description": "Major depeg event"},
    {"min_deviation_pct": 2.0, "description": "Significant price deviation"},
    {"min_deviation_pct": 1.0, "description": "Minor price deviation"},
)
PEG_AT_PEG_BELOW_PCT = 0.1
PEG_AT_PEG_DESCRIPTION = "At peg"
PEG_DEFAULT_DESCRIPTION = "Normal market fluctuation"

# =============================================================================
# AUDIT HISTORY EXTRACTION
# =============================================================================

# Ordered: the first firm found in the path wins.
AUDIT_FIRMS = (
    "Trail of Bits",
    "OpenZeppelin",
    "ConsenSys Diligence",
    "ChainSecurity",
    "Certora",
    "Quantstamp",
    "PeckShield",
    "CertiK",
    "Halborn",
    "Spearbit",
    "Cantina",
    "Code4rena",
    "Sherlock",
    "Sigma Prime",
    "MixBytes",
    "Hacken",
    "Omniscia",
    "Zellic",
    "Runtime Verification",
    "Least Authority",
    "Dedaub",
    "Cyfrin",
    "Hexens",
    "Ackee",
    "Veridise",
    "Kudelski",
    "SlowMist",
    "BlockSec",
    "Nethermind",
    "Pashov",
)

AUDIT_FALLBACK_FIRM = "Independent Auditor"

# Filename tokens that never name an auditor.
GENERIC_FILENAME_TOKENS = (
    "audit", "audits", "report", "reports", "final", "security", "review",
    "smart", "contract", "contracts", "assessment", "v", "pdf", "md", "txt",
    "draft", "fix", "fixes", "summary", "the", "and", "of", "docs",
)

AUDIT_DOCUMENT_EXTENSIONS = (".pdf", ".md", ".markdown", ".txt", ".html", ".htm", ".docx")
AUDIT_TEXT_EXTENSIONS = (".md", ".markdown", ".txt", ".html", ".htm")
AUDIT_PATH_KEYWORDS = ("audit", "security-review", "security_review", "assessment")
AUDIT_DIRECTORY_NAMES = ("audit", "audits")
AUDIT_MIN_PARAGRAPH_CHARS = 50

# =============================================================================
# AUDIT HISTORY SCORING
# =============================================================================

AUDIT_SCORING = {
    "base": 2.5,
    "count_adjustments": [
        {"min_audits": 4, "adjustment": 0.75, "justification": "Repeated independent review across releases."},
        {"min_audits": 2, "adjustment": 0.5, "justification": "More than one firm or engagement reviewed the code."},
        {"min_audits": 1, "adjustment": 0.25, "justification": "At least one public audit exists."},
    ],
    "no_audit_penalty": -1.0,
    "recent_window_days": 365,
    "recent_adjustments": [
        {"min_recent": 2, "adjustment": 0.75, "justification": "Multiple audits within the last year."},
        {"min_recent": 1, "adjustment": 0.5, "justification": "Audit coverage is current."},
    ],
    "critical_penalty_each": -0.5,
    "high_issue_allowance": 2,
    "high_penalty_each": -0.25,
    "active_commit_threshold": 20,
    "active_development_bonus": 0.25,
}

# =============================================================================
# PEG STABILITY SCORING
# =============================================================================

PEG_SCORING = {
    "base": 3.0,
    # Max deviation bands: "below" bands are checked first, then "above" bands.
    "max_deviation_below": [
        {"pct": 1.0, "adjustment": 1.5, "justification": "Never left a 1% band."},
        {"pct": 3.0, "adjustment": 1.0, "justification": "Stayed within 3% of peg."},
        {"pct": 5.0, "adjustment": 0.5, "justification": "Stayed within 5% of peg."},
    ],
    "max_deviation_above": [
        {"pct": 10.0, "adjustment": -1.0, "justification": "Lost more than 10% of peg at least once."},
        {"pct": 5.0, "adjustment": -0.5, "justification": "Lost more than 5% of peg at least once."},
    ],
    "avg_deviation_good_below": 0.5,
    "avg_deviation_good_adjustment": 0.5,
    "avg_deviation_bad_above": 2.0,
    "avg_deviation_bad_adjustment": -0.5,
    "depeg_threshold_pct": 5.0,
    "no_depeg_bonus": 0.5,
    "depeg_penalty_each": -0.5,
}

# =============================================================================
# TRANSPARENCY SCORING
# =============================================================================

TRANSPARENCY_SCORING = {
    # Website analyzer base score (applied when the signal is built)
    "analyzer_base": 2.0,
    "analyzer_por_provider": 1.0,
    "analyzer_por_url": 0.5,
    "analyzer_update_frequency": 0.5,
    "analyzer_last_update": 0.5,
    "analyzer_transparency_page": 0.5,
    # Factor scorer adjustments
    "reserves_dashboard_bonus": 0.5,
    "regular_reporting_bonus": 0.5,
    "no_transparency_page_penalty": -1.0,
    "fiat_backed_low_score_threshold": 3.0,
    "fiat_backed_penalty": -0.5,
    "algorithmic_score_threshold": 2.0,
    "algorithmic_bonus": 0.25,
}

POR_PROVIDERS = ("armanino", "chainlink", "merkle", "proof of reserve")

# =============================================================================
# ORACLE SETUP SCORING
# =============================================================================

ORACLE_SCORING = {
    "no_signal_score": 2.0,
    "base": 2.5,
    "reliable_provider_bonus": 0.75,
    "multiple_oracles_bonus": 0.75,
    "timelock_bonus": 0.5,
    "price_deviation_bonus": 0.5,
    "centralized_penalty": -1.0,
}

RELIABLE_ORACLE_PROVIDERS = (
    "chainlink",
    "pyth",
    "redstone",
    "chronicle",
    "api3",
    "uma",
    "band",
)

# Repository path heuristics (matched against lowercased file paths)
ORACLE_PATH_KEYWORDS = ("oracle", "pricefeed", "price_feed", "price-feed")
TIMELOCK_PATH_KEYWORDS = ("timelock",)
PRICE_DEVIATION_PATH_KEYWORDS = ("deviation", "threshold")
CENTRALIZED_PATH_KEYWORDS = ("admin", "owner")

# =============================================================================
# LIQUIDITY SCORING
# =============================================================================

LIQUIDITY_SCORING = {
    "base": 2.5,
    "total_tiers": [
        {"min_usd": 5e9, "adjustment": 1.5, "justification": "$5B+ circulating across chains."},
        {"min_usd": 1e9, "adjustment": 1.0, "justification": "$1B+ circulating across chains."},
        {"min_usd": 500e6, "adjustment": 0.5, "justification": "$500M+ circulating across chains."},
    ],
    "low_liquidity_usd": 100e6,
    "low_liquidity_adjustment": -0.5,
    "very_low_liquidity_usd": 10e6,
    "very_low_liquidity_adjustment": -1.0,
    "diverse_chain_count": 5,
    "diverse_chain_adjustment": 0.5,
    "single_chain_count": 1,
    "single_chain_adjustment": -0.5,
    "concentration_bands": [
        {"above_pct": 90.0, "adjustment": -0.75},
        {"above_pct": 75.0, "adjustment": -0.5},
    ],
    "distributed_below_pct": 50.0,
    "distributed_adjustment": 0.5,
}

# =============================================================================
# DESCRIPTIONS
# =============================================================================

# (minimum score, description), checked top to bottom.
FACTOR_DESCRIPTIONS = {
    "auditHistory": (
        (4.5, "Excellent audit history with minimal findings"),
        (4.0, "Strong audit history with few significant findings"),
        (3.5, "Good audit history with some resolved issues"),
        (3.0, "Adequate audit history with several findings"),
        (2.5, "Mixed audit history with notable concerns"),
        (2.0, "Limited audit history with significant findings"),
        (1.0, "Poor audit history with critical issues"),
        (0.0, "No verifiable audit history"),
    ),
    "pegStability": (
        (4.5, "Exceptional stability with minimal deviation from peg"),
        (4.0, "Excellent stability with minimal deviation from peg"),
        (3.5, "Very good stability with occasional minor deviations"),
        (3.0, "Good stability with manageable deviations"),
        (2.5, "Moderate stability with notable historical deviations"),
        (2.0, "Fair stability with significant historical deviations"),
        (1.0, "Poor stability with frequent deviations from peg"),
        (0.0, "Very unstable with severe historical depegging events"),
    ),
    "transparency": (
        (4.5, "Industry-leading transparency with comprehensive disclosures"),
        (4.0, "Excellent transparency with detailed disclosures"),
        (3.5, "Very good transparency with regular disclosures"),
        (3.0, "Good transparency with adequate disclosures"),
        (2.5, "Moderate transparency with some disclosure gaps"),
        (2.0, "Limited transparency with significant disclosure gaps"),
        (1.0, "Poor transparency with minimal disclosures"),
        (0.0, "Severely lacking transparency with no meaningful disclosures"),
    ),
    "oracleSetup": (
        (4.5, "Exceptional oracle implementation with multiple safeguards"),
        (4.0, "Excellent oracle implementation with strong security"),
        (3.5, "Very good oracle setup with adequate safeguards"),
        (3.0, "Good oracle implementation with basic security measures"),
        (2.5, "Moderate oracle setup with some centralization"),
        (2.0, "Basic oracle implementation with centralization concerns"),
        (1.0, "Concerning oracle setup with significant vulnerabilities"),
        (0.0, "Highly vulnerable or undisclosed oracle implementation"),
    ),
    "liquidity": (
        (4.5, "Exceptional liquidity across multiple chains"),
        (4.0, "Excellent liquidity across multiple chains"),
        (3.5, "Very good liquidity with good distribution"),
        (3.0, "Good liquidity across major platforms"),
        (2.5, "Moderate liquidity with some concentration"),
        (2.0, "Limited liquidity with significant concentration"),
        (1.0, "Poor liquidity across most platforms"),
        (0.0, "Very low liquidity presenting significant trading risks"),
    ),
}

ORACLE_LIMITED_INFO_DESCRIPTION = "Limited information available about oracle implementation"

# =============================================================================
# SUMMARY
# =============================================================================

RISK_TIERS = (
    (4.0, "low-risk"),
    (3.0, "moderately low-risk"),
    (2.0, "moderate-risk"),
    (0.0, "high-risk"),
)

ADDITIONAL_COMMENTARY = (
    (4.5, "It demonstrates excellent risk management practices across all evaluated factors."),
    (4.0, "It shows strong risk management with minor areas for improvement."),
    (3.5, "It maintains good risk management with some notable areas for improvement."),
    (3.0, "It has adequate risk management with several significant areas that could be strengthened."),
    (2.5, "It shows concerning risk factors that warrant careful consideration."),
    (2.0, "It has substantial risk factors that should be evaluated carefully before use."),
    (1.5, "It has serious weaknesses across several factors that call for extreme caution."),
    (0.0, "It has critical risk factors that suggest extreme caution is warranted."),
)
