"""
Integration tests for the risk report service.

Every provider adapter is replaced with a mock so the full pipeline
(identity -> concurrent signals -> scoring -> cache) runs offline.
"""

import threading
from unittest.mock import DEFAULT, patch

import pytest

from stablecoin_risk.core.exceptions import (
    AdapterTimeoutError,
    AnalysisFailedError,
    ProviderError,
    RateLimitedError,
    TokenNotFoundError,
)
from stablecoin_risk.core.service import (
    analyze_stablecoin,
    error_response,
    gather_signals,
    resolve_coin_info,
)

REPO = "https://github.com/acme/usdx"


@pytest.fixture
def fetchers(
    native_usdx,
    bridged_usdx,
    coin_info,
    price_series_factory,
    liquidity_two_billion,
    transparency_signal,
    repo_files,
    repo_activity,
):
    """All adapters patched with a healthy USDX scenario; tweak per test."""
    with patch.multiple(
        "stablecoin_risk.fetchers.market",
        list_candidates=DEFAULT,
        fetch_market_cap_ranks=DEFAULT,
        fetch_coin_detail=DEFAULT,
        fetch_daily_prices=DEFAULT,
    ) as market_mocks, patch.multiple(
        "stablecoin_risk.fetchers.github",
        find_github_url=DEFAULT,
        list_repo_files=DEFAULT,
        fetch_repo_activity=DEFAULT,
    ) as github_mocks, patch(
        "stablecoin_risk.fetchers.liquidity.fetch_chain_distribution",
        return_value=liquidity_two_billion,
    ) as chain_distribution, patch(
        "stablecoin_risk.fetchers.website.check_transparency",
        return_value=transparency_signal,
    ) as check_transparency:
        market_mocks["list_candidates"].return_value = [bridged_usdx, native_usdx]
        market_mocks["fetch_market_cap_ranks"].return_value = {}
        market_mocks["fetch_coin_detail"].return_value = coin_info
        market_mocks["fetch_daily_prices"].return_value = price_series_factory([1.0] * 30)
        github_mocks["find_github_url"].return_value = REPO
        github_mocks["list_repo_files"].return_value = repo_files
        github_mocks["fetch_repo_activity"].return_value = repo_activity

        yield {
            **market_mocks,
            **github_mocks,
            "fetch_chain_distribution": chain_distribution,
            "check_transparency": check_transparency,
        }


class TestAnalyzeStablecoin:
    """Happy path and caching."""

    @pytest.mark.integration
    @pytest.mark.smoke
    def test_full_report(self, fetchers, coin_info, fixed_now):
        report = analyze_stablecoin("USDX", now=fixed_now)

        fetchers["fetch_coin_detail"].assert_called_once_with("usdx")
        fetchers["fetch_chain_distribution"].assert_called_once_with("USDX", "usdx")
        fetchers["fetch_repo_activity"].assert_called_once()
        assert report.coin_info is coin_info
        assert len(report.peg_events) == 5
        assert [a.firm for a in report.audit_history] == ["Zellic"]
        assert report.factors["auditHistory"].score == pytest.approx(3.5)
        assert report.factors["liquidity"].score == pytest.approx(4.5)
        assert report.total_score == pytest.approx(4.55)
        assert report.summary.startswith("USDX is a low-risk stablecoin")

    @pytest.mark.integration
    def test_report_cached_per_ticker(self, fetchers, fixed_now):
        first = analyze_stablecoin("USDX", now=fixed_now)
        second = analyze_stablecoin("usdx", now=fixed_now)

        assert second is first
        assert fetchers["list_candidates"].call_count == 1

    @pytest.mark.integration
    def test_bypassing_cache_refetches(self, fetchers, fixed_now):
        analyze_stablecoin("USDX", now=fixed_now)
        analyze_stablecoin("USDX", use_cache=False, now=fixed_now)

        assert fetchers["list_candidates"].call_count == 2
        assert fetchers["fetch_daily_prices"].call_count == 2

    @pytest.mark.integration
    def test_market_cap_ranks_are_optional(self, fetchers):
        fetchers["fetch_market_cap_ranks"].side_effect = ProviderError("CoinGecko", "HTTP 500", status_code=500)
        assert resolve_coin_info("USDX").id == "usdx"
        fetchers["fetch_coin_detail"].assert_called_once_with("usdx")


class TestDegradedSignals:
    """Non-critical failures fall back to defaults instead of failing the report."""

    @pytest.mark.integration
    def test_liquidity_unavailable(self, fetchers, fixed_now):
        fetchers["fetch_chain_distribution"].side_effect = TokenNotFoundError("USDX")
        report = analyze_stablecoin("USDX", now=fixed_now)

        assert report.liquidity_data == ()
        assert report.factors["liquidity"].score == pytest.approx(1.0)

    @pytest.mark.integration
    def test_no_repository(self, fetchers, fixed_now):
        fetchers["find_github_url"].return_value = ""
        report = analyze_stablecoin("USDX", now=fixed_now)

        fetchers["list_repo_files"].assert_not_called()
        assert report.audit_history == ()
        assert report.factors["oracleSetup"].score == 2.0
        assert report.factors["auditHistory"].score == pytest.approx(1.5)

    @pytest.mark.integration
    def test_listing_failure_keeps_activity(self, fetchers, fixed_now):
        fetchers["list_repo_files"].side_effect = ProviderError("GitHub", "HTTP 500", status_code=500)
        report = analyze_stablecoin("USDX", now=fixed_now)

        fetchers["fetch_repo_activity"].assert_called_once_with(REPO, [])
        assert report.audit_history == ()
        assert report.factors["oracleSetup"].score == pytest.approx(5.0)

    @pytest.mark.integration
    def test_activity_failure_keeps_audits(self, fetchers, fixed_now):
        fetchers["fetch_repo_activity"].side_effect = RateLimitedError("GitHub", 30)
        report = analyze_stablecoin("USDX", now=fixed_now)

        assert [a.firm for a in report.audit_history] == ["Zellic"]
        assert report.factors["oracleSetup"].score == 2.0


class TestFailures:
    """Critical failures and their caller-facing mapping."""

    @pytest.mark.integration
    @pytest.mark.parametrize("signal,error", [
        ("fetch_daily_prices", AdapterTimeoutError("CoinGecko", 10)),
        ("check_transparency", RuntimeError("parser crashed")),
    ])
    def test_critical_signal_fails_analysis(self, fetchers, signal, error):
        fetchers[signal].side_effect = error
        with pytest.raises(AnalysisFailedError) as exc_info:
            analyze_stablecoin("USDX")

        status, body = error_response(exc_info.value)
        assert status == 500
        assert body == {
            "message": "Failed to analyze stablecoin data",
            "details": "Error fetching price stability or transparency information",
        }

    @pytest.mark.integration
    def test_critical_failure_does_not_wait_for_repo_analysis(self, fetchers, coin_info):
        fetchers["fetch_daily_prices"].side_effect = AdapterTimeoutError("CoinGecko", 10)
        release = threading.Event()
        finished = threading.Event()

        def slow_repo_analysis(*args, **kwargs):
            release.wait(timeout=5)
            finished.set()
            return None, []

        with patch("stablecoin_risk.core.service.load_repo_analysis", side_effect=slow_repo_analysis):
            try:
                with pytest.raises(AnalysisFailedError):
                    gather_signals("USDX", coin_info, use_cache=False)
                assert not finished.is_set()
            finally:
                release.set()

    @pytest.mark.integration
    def test_failed_analysis_is_not_cached(self, fetchers, fixed_now):
        fetchers["fetch_daily_prices"].side_effect = AdapterTimeoutError("CoinGecko", 10)
        with pytest.raises(AnalysisFailedError):
            analyze_stablecoin("USDX", now=fixed_now)

        fetchers["fetch_daily_prices"].side_effect = None
        assert analyze_stablecoin("USDX", now=fixed_now).total_score > 0

    @pytest.mark.integration
    def test_only_bridged(self, fetchers, bridged_usdx):
        fetchers["list_candidates"].return_value = [bridged_usdx]
        with pytest.raises(TokenNotFoundError) as exc_info:
            analyze_stablecoin("USDX")

        status, body = error_response(exc_info.value)
        assert status == 404
        assert body["message"] == "Stablecoin USDX not found: only bridged versions found"
        fetchers["fetch_coin_detail"].assert_not_called()

    @pytest.mark.integration
    def test_unknown_ticker(self, fetchers):
        with pytest.raises(TokenNotFoundError) as exc_info:
            analyze_stablecoin("ZZZ")

        status, body = error_response(exc_info.value)
        assert status == 404
        assert body == {
            "message": "Stablecoin ZZZ not found in CoinGecko database",
            "details": "Please verify the ticker symbol and try again",
        }

    @pytest.mark.integration
    def test_rate_limited_identity(self, fetchers):
        fetchers["list_candidates"].side_effect = RateLimitedError("CoinGecko", 60)
        with pytest.raises(RateLimitedError) as exc_info:
            analyze_stablecoin("USDX")
        assert error_response(exc_info.value) == (429, {
            "message": "Rate limit exceeded",
            "details": "Too many requests. Please try again in a few minutes",
        })

    @pytest.mark.unit
    def test_error_mapping_fallbacks(self):
        assert error_response(AdapterTimeoutError("CoinGecko"))[0] == 504
        assert error_response(ValueError("boom")) == (500, {
            "message": "Failed to analyze stablecoin data",
            "details": "An unexpected error occurred",
        })
