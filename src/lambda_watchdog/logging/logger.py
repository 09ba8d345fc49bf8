"""Root logger setup and logger factory."""

import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from lambda_watchdog.config import LogFormat, WatchdogSettings, get_settings
from lambda_watchdog.logging.formatters import HumanFormatter, JSONFormatter


@dataclass
class LoggingState:
    """Internal state for logging configuration."""

    configured: bool = field(default=False)


_state = LoggingState()


def setup_logging(
    settings: WatchdogSettings | None = None,
    stream: TextIO | None = None,
    *,
    force: bool = False,
) -> None:
    """Set up the root logger with the configured formatter.

    The Lambda runtime installs its own handler on the root logger before
    the module is imported; it is replaced so lines are not written twice.

    Args:
        settings: Optional settings instance. Loads from environment if not provided.
        stream: Output stream for logs. Defaults to sys.stdout.
        force: If True, reconfigure even if already configured.
    """
    if _state.configured and not force:
        return

    if settings is None:
        settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)

    if settings.log_format == LogFormat.JSON:
        formatter: logging.Formatter = JSONFormatter(
            service_name=settings.service_name,
            include_timestamp=settings.include_timestamp,
            include_location=settings.include_location,
        )
    else:
        formatter = HumanFormatter(use_colors=stream is None)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _state.configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)


def reset_logging() -> None:
    """Reset logging configuration. Primarily for testing."""
    _state.configured = False

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    get_settings.cache_clear()
