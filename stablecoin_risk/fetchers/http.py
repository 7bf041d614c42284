"""
Shared HTTP helper for the data provider adapters.

Wraps requests.get with the project timeouts and converts transport
failures into the engine's error taxonomy:

- timeout          -> AdapterTimeoutError
- HTTP 429         -> retried after Retry-After, then RateLimitedError
- HTTP 5xx / reset -> retried with exponential backoff, then ProviderError
- other HTTP >=400 -> ProviderError (status_code set)
"""

import time
from typing import Any, Dict, Optional

import requests

from ..config.settings import (
    MAX_RETRIES,
    MAX_RETRY_AFTER_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    USER_AGENT,
)
from ..core.exceptions import AdapterTimeoutError, ProviderError, RateLimitedError
from ..core.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60.0
BACKOFF_BASE_SECONDS = 1.0


def retry_after_seconds(response: requests.Response) -> float:
    """Retry-After header in seconds (only the delta-seconds form is honoured)."""
    value = response.headers.get("Retry-After")
    try:
        return float(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS


def get_response(
    url: str,
    provider: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    max_retries: int = MAX_RETRIES,
) -> requests.Response:
    """
    GET a URL with retries.

    Args:
        url: Absolute URL
        provider: Provider name used in errors and logs
        params: Query parameters
        headers: Extra headers (a browser User-Agent is always sent)
        timeout: Per-attempt timeout in seconds
        max_retries: Retries after the first attempt

    Returns:
        The successful (status < 400) response
    """
    request_headers = {"User-Agent": USER_AGENT}
    request_headers.update(headers or {})

    for attempt in range(max_retries + 1):
        last_attempt = attempt == max_retries
        try:
            response = requests.get(url, params=params, headers=request_headers, timeout=timeout)
        except requests.Timeout as e:
            raise AdapterTimeoutError(provider, timeout) from e
        except requests.RequestException as e:
            if last_attempt:
                raise ProviderError(provider, str(e)) from e
            logger.warning("request_failed_retrying", provider=provider, attempt=attempt + 1, error=str(e))
            time.sleep(BACKOFF_BASE_SECONDS * 2 ** attempt)
            continue

        status = response.status_code
        if status == 429:
            wait = retry_after_seconds(response)
            if last_attempt or wait > MAX_RETRY_AFTER_SECONDS:
                raise RateLimitedError(provider, wait)
            logger.warning("rate_limited_retrying", provider=provider, attempt=attempt + 1, retry_after=wait)
            time.sleep(wait)
            continue

        if status >= 500 and not last_attempt:
            logger.warning("server_error_retrying", provider=provider, attempt=attempt + 1, status=status)
            time.sleep(BACKOFF_BASE_SECONDS * 2 ** attempt)
            continue

        if status >= 400:
            raise ProviderError(provider, f"HTTP {status} for {url}", status_code=status)

        return response

    raise ProviderError(provider, f"retries exhausted for {url}")


def get_json(url: str, provider: str, **kwargs) -> Any:
    """GET a URL and decode the JSON body."""
    response = get_response(url, provider, **kwargs)
    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(provider, f"invalid JSON from {url}") from e
