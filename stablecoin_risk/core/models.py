"""
Data model for the stablecoin risk engine.

Every entity is built once by the component that produces it and handed to
consumers by value. All classes are frozen; to_dict() produces the JSON shape
served to the dashboard (camelCase keys, ISO dates).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


# =============================================================================
# COIN IDENTITY
# =============================================================================

@dataclass(frozen=True)
class CoinCandidate:
    """One entry of the market-data provider's coin listing."""
    id: str
    name: str
    symbol: str
    platforms: Mapping[str, str] = field(default_factory=dict)
    market_cap_rank: Optional[int] = None

    @property
    def chains(self) -> List[str]:
        """Platform ids the token is deployed on (blank keys ignored)."""
        return [chain for chain in self.platforms if chain]

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "CoinCandidate":
        return cls(
            id=item.get("id", ""),
            name=item.get("name", ""),
            symbol=item.get("symbol", ""),
            platforms=dict(item.get("platforms") or {}),
            market_cap_rank=item.get("market_cap_rank"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "platforms": dict(self.platforms),
            "marketCapRank": self.market_cap_rank,
        }


@dataclass(frozen=True)
class NativeTokenResolution:
    """Outcome of picking the canonical deployment among same-ticker candidates."""
    selected: CoinCandidate
    score: float
    rejected_bridges: Tuple[CoinCandidate, ...] = ()


@dataclass(frozen=True)
class CoinInfo:
    id: str
    name: str
    symbol: str
    description: str = ""
    website: str = ""
    github: str = ""
    market_cap: float = 0.0
    launch_date: str = "Unknown"
    collateral_type: str = "Unknown"
    blockchain: str = "Unknown"
    price_feed: str = ""
    logo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "logo": self.logo,
            "description": self.description,
            "website": self.website,
            "github": self.github,
            "marketCap": self.market_cap,
            "launchDate": self.launch_date,
            "collateralType": self.collateral_type,
            "blockchain": self.blockchain,
            "priceFeed": self.price_feed,
        }


# =============================================================================
# PRICE SERIES
# =============================================================================

@dataclass(frozen=True)
class PriceSample:
    date: date
    price: float


@dataclass(frozen=True)
class PegEvent:
    date: date
    price: float
    description: str

    @property
    def deviation_pct(self) -> float:
        return abs(self.price - 1.0) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {"date": _iso(self.date), "price": self.price, "description": self.description}


# =============================================================================
# AUDITS
# =============================================================================

@dataclass(frozen=True)
class IssueCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def to_dict(self) -> Dict[str, int]:
        return {"critical": self.critical, "high": self.high, "medium": self.medium, "low": self.low}


@dataclass(frozen=True)
class AuditRecord:
    firm: str
    date: date
    summary: str
    link: Optional[str] = None
    issues: IssueCounts = field(default_factory=IssueCounts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm": self.firm,
            "date": _iso(self.date),
            "summary": self.summary,
            "link": self.link,
            "issues": self.issues.to_dict(),
        }


# =============================================================================
# ADAPTER SIGNALS
# =============================================================================

@dataclass(frozen=True)
class RepoFile:
    """One file from a source repository listing."""
    path: str
    last_modified: Optional[datetime] = None
    content: Optional[str] = None
    url: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class LiquidityEntry:
    chain: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"chain": self.chain, "amount": self.amount}


@dataclass(frozen=True)
class OracleSignal:
    """Oracle implementation hints mined from repository file paths."""
    uses_reliable_provider: bool = False
    provider: Optional[str] = None
    has_multiple_oracles: bool = False
    has_timelock: bool = False
    has_price_deviation: bool = False
    centralized: bool = True


@dataclass(frozen=True)
class RepoActivity:
    recent_commits: int = 0
    contributor_count: int = 0
    open_issues: int = 0
    has_security_policy: bool = False
    oracle: Optional[OracleSignal] = None


@dataclass(frozen=True)
class ReserveHolding:
    asset: str
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"asset": self.asset, "percentage": self.percentage}


@dataclass(frozen=True)
class TransparencySignal:
    """Transparency indicators scraped from the issuer's website."""
    score: float
    has_transparency_page: bool = False
    has_reserves_dashboard: bool = False
    has_regular_reporting: bool = False
    details: Tuple[str, ...] = ()
    por_provider: Optional[str] = None
    por_url: Optional[str] = None
    update_frequency: Optional[str] = None
    last_update: Optional[str] = None
    transparency_url: Optional[str] = None
    reserves: Tuple[ReserveHolding, ...] = ()

    @classmethod
    def unavailable(cls) -> "TransparencySignal":
        """Default used when the website could not be fetched or parsed."""
        return cls(
            score=2.0,
            details=(
                "Unable to verify transparency information",
                "No public reserves dashboard found",
                "Consider researching official documentation",
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "porProvider": self.por_provider,
            "porUrl": self.por_url,
            "updateFrequency": self.update_frequency,
            "lastUpdate": self.last_update,
            "transparencyUrl": self.transparency_url,
            "reserves": [r.to_dict() for r in self.reserves] or None,
        }


# =============================================================================
# SCORES
# =============================================================================

@dataclass(frozen=True)
class RiskFactor:
    name: str
    score: float
    description: str
    details: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "description": self.description,
            "details": list(self.details),
        }


@dataclass(frozen=True)
class RiskReport:
    """Root aggregate returned to callers and cached per ticker."""
    coin_info: CoinInfo
    total_score: float
    summary: str
    factors: Mapping[str, RiskFactor]
    peg_events: Tuple[PegEvent, ...] = ()
    audit_history: Tuple[AuditRecord, ...] = ()
    liquidity_data: Tuple[LiquidityEntry, ...] = ()
    transparency: Optional[TransparencySignal] = None
    discrepancies: Tuple[Dict[str, Any], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "factors", MappingProxyType(dict(self.factors)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coinInfo": self.coin_info.to_dict(),
            "totalScore": self.total_score,
            "summary": self.summary,
            "discrepancies": list(self.discrepancies),
            "factors": {key: factor.to_dict() for key, factor in self.factors.items()},
            "pegEvents": [event.to_dict() for event in self.peg_events],
            "auditHistory": [audit.to_dict() for audit in self.audit_history],
            "liquidityData": [entry.to_dict() for entry in self.liquidity_data],
            "transparencyInfo": self.transparency.to_dict() if self.transparency else None,
        }
