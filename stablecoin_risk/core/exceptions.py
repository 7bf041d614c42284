"""
Error taxonomy for the stablecoin risk engine.

NotFound, RateLimited and Timeout originate in the data provider adapters.
Fatal failures after identity resolution surface as AnalysisFailedError.
Degraded (non-critical) signals are never raised: they show up as default
values with a "limited information" description instead.
"""

from typing import Optional

NOT_FOUND_REASON = "not found"
ONLY_BRIDGED_REASON = "only bridged versions found"


class StablecoinRiskError(Exception):
    """Base class for all engine errors."""


class TokenNotFoundError(StablecoinRiskError):
    """Ticker absent from the catalogue, or only bridged deployments exist."""

    def __init__(self, ticker: str, reason: str = NOT_FOUND_REASON):
        self.ticker = ticker
        self.reason = reason
        super().__init__(f"Stablecoin {ticker} not found ({reason})")

    @property
    def only_bridged(self) -> bool:
        return self.reason == ONLY_BRIDGED_REASON


class RateLimitedError(StablecoinRiskError):
    """Upstream provider answered 429."""

    def __init__(self, provider: str, retry_after: Optional[float] = None):
        self.provider = provider
        self.retry_after = retry_after
        super().__init__(f"{provider} rate limit exceeded")


class AdapterTimeoutError(StablecoinRiskError):
    """Adapter exceeded its deadline."""

    def __init__(self, provider: str, timeout: Optional[float] = None):
        self.provider = provider
        self.timeout = timeout
        super().__init__(f"{provider} request timed out")


class ProviderError(StablecoinRiskError):
    """Upstream answered with an unexpected status or payload."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider}: {message}")


class AnalysisFailedError(StablecoinRiskError):
    """A critical fetch failed after the coin identity was resolved."""

    def __init__(self, message: str, details: str = "An unexpected error occurred"):
        self.details = details
        super().__init__(message)
