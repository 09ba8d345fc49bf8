"""Structured logging for Lambda invocations.

Usage:
    from lambda_watchdog.logging import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
    logger.warning("Low Memory Warning", extra={"MemoryUsedInMB": 96})
"""

from lambda_watchdog.logging.context import (
    bind_invocation_fields,
    clear_context,
    get_invocation_fields,
    get_request_id,
    request_id,
    set_request_id,
)
from lambda_watchdog.logging.formatters import HumanFormatter, JSONFormatter
from lambda_watchdog.logging.logger import get_logger, setup_logging

__all__ = [
    "HumanFormatter",
    "JSONFormatter",
    "bind_invocation_fields",
    "clear_context",
    "get_invocation_fields",
    "get_logger",
    "get_request_id",
    "request_id",
    "set_request_id",
    "setup_logging",
]
