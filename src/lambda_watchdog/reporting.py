"""Reporting collaborator interface and a logging-backed implementation.

The interceptor and the watchdog never talk to a transport directly. They
take a ``Reporter``, created once per process and reused by every
invocation in a warm container.

Capture calls return an ``asyncio.Future`` that resolves once the report
has been handled. Watchdog checks ignore it; the interceptor awaits it
before letting an erroring invocation complete. A transport failure is
signalled by setting an exception on the future.
"""

import asyncio
import logging
from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class ReportLevel(StrEnum):
    """Severity attached to a report."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS: dict[ReportLevel, int] = {
    ReportLevel.ERROR: logging.ERROR,
    ReportLevel.WARNING: logging.WARNING,
    ReportLevel.INFO: logging.INFO,
}


class ReportEvent(BaseModel):
    """A message or exception submitted for reporting."""

    model_config = ConfigDict(frozen=True)

    message: str
    level: ReportLevel
    extra: dict[str, Any] = Field(default_factory=dict)
    tags: dict[str, Any] = Field(default_factory=dict)
    exception_type: str | None = None


class Reporter(Protocol):
    """Error-reporting collaborator."""

    def capture_exception(self, error: BaseException) -> "asyncio.Future[None]":
        """Report an exception."""
        ...

    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel,
        extra: dict[str, Any] | None = None,
    ) -> "asyncio.Future[None]":
        """Report a plain message."""
        ...

    def merge_context(
        self,
        *,
        extra: dict[str, Any] | None = None,
        tags: dict[str, Any] | None = None,
    ) -> None:
        """Attach metadata to every subsequent report."""
        ...


class LoggingReporter:
    """Reporter that writes report events through the structured logger.

    Reports are written synchronously, so the returned futures are already
    resolved. Must be called from a running event loop.
    """

    def __init__(self, logger_name: str = "lambda_watchdog.reports") -> None:
        self._logger = logging.getLogger(logger_name)
        self._extra: dict[str, Any] = {}
        self._tags: dict[str, Any] = {}

    @property
    def extra(self) -> dict[str, Any]:
        return dict(self._extra)

    @property
    def tags(self) -> dict[str, Any]:
        return dict(self._tags)

    def merge_context(
        self,
        *,
        extra: dict[str, Any] | None = None,
        tags: dict[str, Any] | None = None,
    ) -> None:
        """Merge metadata into the context attached to every report.

        Args:
            extra: Free-form metadata; keys replace earlier values.
            tags: Short indexed identifiers; keys replace earlier values.
        """
        if extra:
            self._extra.update(extra)
        if tags:
            self._tags.update(tags)

    def capture_exception(self, error: BaseException) -> "asyncio.Future[None]":
        """Report an exception at error level, traceback included."""
        event = ReportEvent(
            message=str(error) or type(error).__name__,
            level=ReportLevel.ERROR,
            extra=self.extra,
            tags=self.tags,
            exception_type=type(error).__name__,
        )
        return self._emit(event, exc_info=error)

    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel,
        extra: dict[str, Any] | None = None,
    ) -> "asyncio.Future[None]":
        """Report a message, merging call-site extras over the context extras."""
        merged = self.extra
        if extra:
            merged.update(extra)
        event = ReportEvent(message=message, level=level, extra=merged, tags=self.tags)
        return self._emit(event)

    def _emit(
        self,
        event: ReportEvent,
        exc_info: BaseException | None = None,
    ) -> "asyncio.Future[None]":
        acknowledgment: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._logger.log(
            _LOG_LEVELS[event.level],
            event.message,
            exc_info=exc_info,
            extra={"report": event.model_dump(exclude={"message"})},
        )
        acknowledgment.set_result(None)
        return acknowledgment
