"""
Structured logging for the stablecoin risk engine.

structlog is configured once on first import. Log with a snake_case event
name and keyword context:

    logger = get_logger(__name__)
    logger.info("risk_report_built", ticker="USDC", total_score=4.1)

LOG_FORMAT=json renders one JSON object per line; anything else uses the
console renderer.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

import structlog

from ..config.settings import LOG_FORMAT, LOG_LEVEL

LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)


def _add_timestamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure an ISO 8601 UTC timestamp is present."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str):
    """Return a structured logger bound to the given module name."""
    return structlog.get_logger(name).bind(logger=name)


def bind_ticker(ticker: str):
    """Return a logger with the ticker bound to every subsequent call."""
    return get_logger("stablecoin_risk").bind(ticker=ticker.upper())
