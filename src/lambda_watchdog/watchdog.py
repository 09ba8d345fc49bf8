"""Timer-based watchdog for a single Lambda invocation.

Three checks run on the invocation's event loop while the handler body
executes:

- time-warning: once, halfway through the time budget.
- time-critical: once, shortly before Lambda kills the invocation.
- memory-poll: repeatedly, until the process crosses the memory threshold.

The memory poll re-arms itself with a one-shot timer after each check
instead of running on a fixed interval, so a slow check can never overlap
or skip the next one.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any

import psutil
from pydantic import BaseModel, ConfigDict, Field

from lambda_watchdog.config import WatchdogSettings
from lambda_watchdog.exceptions import ReportingError, WatchdogStateError
from lambda_watchdog.reporting import Reporter, ReportLevel
from lambda_watchdog.types import LambdaContext

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1048576


def _log_failed_report(acknowledgment: "asyncio.Future[None]") -> None:
    """Retrieve a fire-and-forget report result so failures are logged, not lost."""
    if acknowledgment.cancelled():
        return
    reporter_error = acknowledgment.exception()
    if reporter_error is not None:
        failure = ReportingError("Watchdog report failed")
        logger.warning(failure.message, extra=failure.to_log_dict(), exc_info=reporter_error)


def resident_memory_mb() -> float:
    """Return the resident set size of this process in megabytes."""
    return psutil.Process().memory_info().rss / _BYTES_PER_MB


class InvocationBudget(BaseModel):
    """Time and memory limits captured when the watchdog starts."""

    model_config = ConfigDict(frozen=True)

    remaining_time_ms: int
    memory_limit_mb: int = Field(gt=0)

    @property
    def warning_after_seconds(self) -> float:
        """Elapsed time reported by the time-warning check."""
        return math.ceil(self.remaining_time_ms / 1000) / 2


class Watchdog:
    """Schedules and cancels the time and memory checks of one invocation."""

    def __init__(
        self,
        reporter: Reporter,
        settings: WatchdogSettings,
        context: LambdaContext,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        memory_reader: Callable[[], float] = resident_memory_mb,
    ) -> None:
        """Initialize the watchdog.

        Args:
            reporter: Collaborator receiving warnings.
            settings: Capture switches and tuning values.
            context: Lambda context queried for remaining time and memory limit.
            loop: Event loop to schedule on. Defaults to the running loop at start().
            memory_reader: Returns current memory usage in megabytes.
        """
        self._reporter = reporter
        self._settings = settings
        self._context = context
        self._loop = loop
        self._memory_reader = memory_reader

        self._budget: InvocationBudget | None = None
        self._started = False
        self._closed = False

        self._timeout_warning: asyncio.TimerHandle | None = None
        self._timeout_error: asyncio.TimerHandle | None = None
        self._memory_watch: asyncio.TimerHandle | None = None

    @property
    def budget(self) -> InvocationBudget | None:
        return self._budget

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_timers(self) -> dict[str, asyncio.TimerHandle]:
        """Outstanding timer handles by role."""
        handles = {
            "timeout_warning": self._timeout_warning,
            "timeout_error": self._timeout_error,
            "memory_watch": self._memory_watch,
        }
        return {role: handle for role, handle in handles.items() if handle is not None}

    def start(self) -> None:
        """Capture the invocation budget and schedule the enabled checks.

        Raises:
            WatchdogStateError: If already started or already cancelled.
        """
        if self._closed:
            raise WatchdogStateError("Watchdog cancelled before start")
        if self._started:
            raise WatchdogStateError("Watchdog already started")
        self._started = True

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        self._budget = InvocationBudget(
            remaining_time_ms=self._context.get_remaining_time_in_millis(),
            memory_limit_mb=self._context.memory_limit_in_mb,
        )
        remaining = self._budget.remaining_time_ms

        if self._settings.capture_timeout_warnings:
            self._timeout_warning = self._schedule(remaining / 2, self._check_timeout_warning)
            self._timeout_error = self._schedule(
                max(remaining - self._settings.timeout_margin_ms, 0),
                self._check_timeout_error,
            )

        if self._settings.capture_memory_warnings:
            self._memory_watch = self._schedule(
                self._settings.memory_poll_interval_ms, self._check_memory
            )

        logger.debug(
            "Watchdog started",
            extra={
                "remaining_time_ms": remaining,
                "memory_limit_mb": self._budget.memory_limit_mb,
                "timers": sorted(self.active_timers),
            },
        )

    def cancel_all(self) -> None:
        """Cancel every outstanding check. Safe to call any number of times.

        After the first call the watchdog is closed and schedules nothing new.
        """
        self._closed = True

        if self._timeout_warning is not None:
            self._timeout_warning.cancel()
            self._timeout_warning = None

        if self._timeout_error is not None:
            self._timeout_error.cancel()
            self._timeout_error = None

        if self._memory_watch is not None:
            self._memory_watch.cancel()
            self._memory_watch = None

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        assert self._loop is not None
        return self._loop.call_later(delay_ms / 1000, callback)

    def _report(
        self,
        message: str,
        *,
        level: ReportLevel,
        extra: dict[str, Any] | None = None,
    ) -> None:
        acknowledgment = self._reporter.capture_message(message, level=level, extra=extra)
        if acknowledgment is not None:
            acknowledgment.add_done_callback(_log_failed_report)

    def _check_timeout_warning(self) -> None:
        self._timeout_warning = None
        assert self._budget is not None
        self._report(
            f"Execution Time Exceeds {self._budget.warning_after_seconds:g} seconds",
            level=ReportLevel.WARNING,
            extra={"TimeRemainingInMsec": self._context.get_remaining_time_in_millis()},
        )

    def _check_timeout_error(self) -> None:
        # Lambda terminates the process shortly after; nothing else to do.
        self._timeout_error = None
        self._report("Function Timed Out", level=ReportLevel.ERROR)

    def _check_memory(self) -> None:
        self._memory_watch = None
        if self._closed:
            return

        assert self._budget is not None
        limit = self._budget.memory_limit_mb
        used = self._memory_reader()

        if used / limit >= self._settings.memory_warning_threshold:
            self._report(
                "Low Memory Warning",
                level=ReportLevel.WARNING,
                extra={
                    "MemoryLimitInMB": limit,
                    "MemoryUsedInMB": math.floor(used),
                },
            )
            return

        self._memory_watch = self._schedule(
            self._settings.memory_poll_interval_ms, self._check_memory
        )
