"""Completion callback interception.

The wrapped callback cancels the watchdog, reports the error when one must
be reported, waits for the reporter to acknowledge, and only then hands the
original ``(error, data)`` pair to the platform callback.
"""

import asyncio
import inspect
import logging

from lambda_watchdog.config import WatchdogSettings
from lambda_watchdog.exceptions import ReportingError, ReportTimeoutError
from lambda_watchdog.reporting import Reporter, ReportLevel
from lambda_watchdog.types import CompletionCallback, DoneCallback
from lambda_watchdog.watchdog import Watchdog

logger = logging.getLogger(__name__)

_BACKGROUND_FAULT_ATTR = "__lambda_background_fault__"


def mark_background_fault(error: BaseException) -> BaseException:
    """Flag an error as raised outside the direct completion path.

    Flagged errors are reported even when ``capture_errors`` is off.

    Returns:
        The same error, for use in ``raise mark_background_fault(err)``.
    """
    setattr(error, _BACKGROUND_FAULT_ATTR, True)
    return error


def is_background_fault(error: object) -> bool:
    """Check whether an error was flagged by mark_background_fault."""
    return getattr(error, _BACKGROUND_FAULT_ATTR, False) is True


class CompletionInterceptor:
    """Wraps the platform completion callback of one invocation."""

    def __init__(
        self,
        reporter: Reporter,
        settings: WatchdogSettings,
        watchdog: Watchdog,
    ) -> None:
        self._reporter = reporter
        self._settings = settings
        self._watchdog = watchdog
        self._done: CompletionCallback | None = None

    def wrap(self, done: DoneCallback) -> CompletionCallback:
        """Return a replacement for ``done`` with the same ``(error, data)`` signature.

        Args:
            done: The platform completion callback. May return an awaitable.

        Returns:
            An async callback that forwards to ``done`` unchanged.
        """

        async def completion_wrapper(error: object, data: object) -> None:
            # Timers must not outlive the invocation they observe.
            self._watchdog.cancel_all()

            if error and self._should_report(error):
                await self._capture_error(error)

            result = done(error, data)
            if inspect.isawaitable(result):
                await result

        self._done = completion_wrapper
        return completion_wrapper

    async def fail(self, error: object) -> None:
        """Complete the invocation with an error."""
        await self._wrapped(error, None)

    async def succeed(self, data: object = None) -> None:
        """Complete the invocation successfully."""
        await self._wrapped(None, data)

    @property
    def _wrapped(self) -> CompletionCallback:
        if self._done is None:
            raise RuntimeError("wrap() must be called before completing")
        return self._done

    def _should_report(self, error: object) -> bool:
        return self._settings.capture_errors or is_background_fault(error)

    async def _capture_error(self, error: object) -> None:
        """Report ``error`` and wait until the reporter is done with it.

        A failing reporter counts as done: reporting problems are logged and
        never change the outcome of the invocation.
        """
        report_type = type(error).__name__
        timeout = self._settings.report_ack_timeout_seconds
        acknowledgment: asyncio.Future[None] | None = None
        try:
            if isinstance(error, BaseException):
                acknowledgment = self._reporter.capture_exception(error)
            else:
                acknowledgment = self._reporter.capture_message(
                    str(error), level=ReportLevel.ERROR
                )
            if timeout is None:
                await acknowledgment
            else:
                await asyncio.wait_for(acknowledgment, timeout)
        except asyncio.CancelledError:
            # Only a reporter that cancelled its own acknowledgment counts as done.
            task = asyncio.current_task()
            if acknowledgment is None or not acknowledgment.cancelled():
                raise
            if task is not None and task.cancelling():
                raise
            failure = ReportingError("Error report was cancelled", report_type=report_type)
            logger.warning(failure.message, extra=failure.to_log_dict())
        except TimeoutError as reporter_error:
            if timeout is None:
                _log_reporting_failure(reporter_error, report_type)
                return
            failure = ReportTimeoutError(
                "Error report was not acknowledged in time",
                timeout_seconds=timeout,
                report_type=report_type,
            )
            logger.warning(failure.message, extra=failure.to_log_dict())
        except Exception as reporter_error:
            _log_reporting_failure(reporter_error, report_type)


def _log_reporting_failure(reporter_error: BaseException, report_type: str) -> None:
    failure = ReportingError("Error report failed", report_type=report_type)
    logger.warning(failure.message, extra=failure.to_log_dict(), exc_info=reporter_error)
