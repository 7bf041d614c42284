"""
Pytest configuration and fixtures for the stablecoin risk engine.

This file contains shared fixtures used across all test modules.
Fixtures follow the pattern: factory functions with auto-cleanup.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import MagicMock

from stablecoin_risk.core.cache import clear_all_caches
from stablecoin_risk.core.models import (
    AuditRecord,
    CoinCandidate,
    CoinInfo,
    IssueCounts,
    LiquidityEntry,
    OracleSignal,
    PegEvent,
    PriceSample,
    RepoActivity,
    RepoFile,
    TransparencySignal,
)


# =============================================================================
# CACHE ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_caches():
    """Every test starts and ends with empty caches."""
    clear_all_caches()
    yield
    clear_all_caches()


# =============================================================================
# TIME FIXTURES
# =============================================================================

@pytest.fixture
def fixed_now() -> datetime:
    """Reference time used for audit recency windows."""
    return datetime(2024, 6, 15, 12, 0, 0)


# =============================================================================
# COIN IDENTITY FIXTURES
# =============================================================================

@pytest.fixture
def native_usdx() -> CoinCandidate:
    return CoinCandidate(
        id="usdx",
        name="USDX",
        symbol="usdx",
        platforms={"ethereum": "0x1111", "solana": "UsdxMint111"},
    )


@pytest.fixture
def bridged_usdx() -> CoinCandidate:
    return CoinCandidate(
        id="bridged-polygon-usdx",
        name="Bridged USDX (Polygon)",
        symbol="usdx",
        platforms={"polygon-pos": "0x2222"},
    )


@pytest.fixture
def coin_info() -> CoinInfo:
    return CoinInfo(
        id="usdx",
        name="USDX",
        symbol="USDX",
        description="USDX is a fiat-backed stablecoin",
        website="https://usdx.io",
        github="https://github.com/acme/usdx",
        market_cap=2_000_000_000,
        launch_date="2021-03-01",
        collateral_type="Fiat-backed",
        blockchain="Multi-chain",
        price_feed="coinbase",
    )


# =============================================================================
# SIGNAL FACTORIES
# =============================================================================

@pytest.fixture
def price_series_factory():
    """
    Factory for consecutive daily PriceSample series.

    Usage:
        def test_something(price_series_factory):
            samples = price_series_factory([1.0, 0.99, 1.01])
    """
    def _create(prices: Sequence[float], start: date = date(2024, 1, 1)) -> List[PriceSample]:
        return [PriceSample(date=start + timedelta(days=i), price=p) for i, p in enumerate(prices)]

    return _create


@pytest.fixture
def peg_event_factory():
    """Factory for PegEvent lists from prices, one day apart."""
    def _create(prices: Sequence[float], start: date = date(2024, 1, 1)) -> List[PegEvent]:
        return [
            PegEvent(date=start + timedelta(days=i), price=p, description="test")
            for i, p in enumerate(prices)
        ]

    return _create


@pytest.fixture
def audit_factory():
    """Factory for AuditRecord instances with sensible defaults."""
    def _create(
        audit_date: date,
        firm: str = "Zellic",
        critical: int = 0,
        high: int = 0,
        medium: int = 0,
        low: int = 0,
    ) -> AuditRecord:
        return AuditRecord(
            firm=firm,
            date=audit_date,
            summary="Security audit report",
            issues=IssueCounts(critical=critical, high=high, medium=medium, low=low),
        )

    return _create


@pytest.fixture
def strong_oracle() -> OracleSignal:
    return OracleSignal(
        uses_reliable_provider=True,
        provider="chainlink",
        has_multiple_oracles=True,
        has_timelock=True,
        has_price_deviation=True,
        centralized=False,
    )


@pytest.fixture
def repo_activity(strong_oracle) -> RepoActivity:
    return RepoActivity(
        recent_commits=30,
        contributor_count=42,
        open_issues=7,
        has_security_policy=True,
        oracle=strong_oracle,
    )


@pytest.fixture
def liquidity_two_billion() -> List[LiquidityEntry]:
    """$2B across 6 chains, top chain holding 40%."""
    return [
        LiquidityEntry("Ethereum", 800e6),
        LiquidityEntry("Tron", 400e6),
        LiquidityEntry("Solana", 300e6),
        LiquidityEntry("Arbitrum", 200e6),
        LiquidityEntry("Base", 200e6),
        LiquidityEntry("Polygon", 100e6),
    ]


@pytest.fixture
def transparency_signal() -> TransparencySignal:
    return TransparencySignal(
        score=4.0,
        has_transparency_page=True,
        has_reserves_dashboard=True,
        has_regular_reporting=True,
        details=("Proof of Reserves provided by Armanino", "Reserve data updated monthly"),
        por_provider="Armanino",
        por_url="https://usdx.io/reserves",
        update_frequency="Monthly",
        transparency_url="https://usdx.io/transparency",
    )


@pytest.fixture
def repo_files() -> List[RepoFile]:
    return [
        RepoFile(
            path="audits/Zellic-USDX-2024.md",
            last_modified=datetime(2024, 3, 1, tzinfo=timezone.utc),
            content="# Summary\n\nThe engagement reviewed minting and redemption logic and found 1 high severity issue.\n",
        ),
        RepoFile(path="contracts/Token.sol"),
        RepoFile(path="contracts/oracle/ChainlinkOracle.sol"),
    ]


# =============================================================================
# MOCK FIXTURES FOR EXTERNAL APIS
# =============================================================================

@pytest.fixture
def response_factory():
    """
    Factory for mocked requests.Response objects.

    Usage:
        def test_fetch(response_factory):
            with patch("requests.get", return_value=response_factory({"ok": 1})):
                ...
    """
    def _create(
        json_data: Any = None,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
        text: str = "",
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status
        response.headers = headers or {}
        response.json.return_value = json_data
        response.text = text
        response.content = text.encode() if text else (b"{}" if json_data is not None else b"")
        return response

    return _create


@pytest.fixture
def mock_market_chart() -> Dict[str, Any]:
    """Sample CoinGecko market_chart response."""
    return {
        "prices": [
            [1704067200000, 1.0002],  # 2024-01-01
            [1704153600000, 0.9991],  # 2024-01-02
            [1704240000000, 1.0010],  # 2024-01-03
        ],
        "market_caps": [],
        "total_volumes": [],
    }
