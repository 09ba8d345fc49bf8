"""Concrete watchdog exceptions."""

from typing import Any, ClassVar

from lambda_watchdog.exceptions.base import LambdaWatchdogError


class WatchdogStateError(LambdaWatchdogError):
    """Watchdog used outside its start/cancel lifecycle."""

    error_code: ClassVar[str] = "WATCHDOG_STATE_ERROR"


class ReportingError(LambdaWatchdogError):
    """Reporting collaborator failed to deliver a report."""

    error_code: ClassVar[str] = "REPORTING_ERROR"

    def __init__(
        self,
        message: str,
        *,
        report_type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize reporting error.

        Args:
            message: Description of the failure.
            report_type: Type name of the value that was being reported.
            context: Additional context information.
        """
        context_dict = context or {}
        if report_type is not None:
            context_dict["report_type"] = report_type
        super().__init__(message, context=context_dict)


class ReportTimeoutError(ReportingError):
    """Reporting collaborator did not acknowledge in time."""

    error_code: ClassVar[str] = "REPORT_TIMEOUT"

    def __init__(
        self,
        message: str,
        *,
        timeout_seconds: float,
        report_type: str | None = None,
    ) -> None:
        """Initialize report timeout error.

        Args:
            message: Description of the timeout.
            timeout_seconds: The acknowledgment timeout that elapsed.
            report_type: Type name of the value that was being reported.
        """
        super().__init__(
            message,
            report_type=report_type,
            context={"timeout_seconds": timeout_seconds},
        )
