"""
Unit tests for the in-process TTL caches.
"""

import pytest

from stablecoin_risk.config.settings import CACHE_TTL_CONFIG
from stablecoin_risk.core.cache import CACHES, TTLCache, clear_all_caches, get_cache


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTTLCache:

    @pytest.mark.unit
    def test_hit_then_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("usdc", {"score": 4.2})

        clock.now = 59.9
        assert cache.get("usdc") == {"score": 4.2}

        clock.now = 60.0
        assert cache.get("usdc") is None
        assert len(cache) == 0

    @pytest.mark.unit
    def test_expired_entries_pruned_without_reads(self):
        clock = FakeClock()
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("usdc", 1)
        cache.set("usdt", 2)

        clock.now = 30.0
        cache.set("dai", 3)
        assert len(cache) == 3

        clock.now = 61.0
        assert len(cache) == 1
        cache.set("frax", 4)
        assert sorted(cache._entries) == ["dai", "frax"]

    @pytest.mark.unit
    def test_keys_are_case_insensitive(self):
        cache = TTLCache(ttl=60, clock=FakeClock())
        cache.set("USDC", 1)
        assert cache.get("usdc") == 1
        assert "Usdc" in cache

    @pytest.mark.unit
    def test_missing_key(self):
        assert TTLCache().get("nope") is None


class TestNamedCaches:

    @pytest.mark.unit
    def test_one_cache_per_configured_result(self):
        assert set(CACHES) == set(CACHE_TTL_CONFIG)
        assert get_cache("risk_report").ttl == CACHE_TTL_CONFIG["risk_report"]

    @pytest.mark.unit
    def test_clear_all_caches(self):
        get_cache("risk_report").set("usdc", "report")
        get_cache("github_url").set("usdc", "https://github.com/circlefin")
        clear_all_caches()
        assert all(len(cache) == 0 for cache in CACHES.values())
