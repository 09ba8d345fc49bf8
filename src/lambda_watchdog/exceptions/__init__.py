"""Lambda watchdog exception hierarchy.

Architecture:
    LambdaWatchdogError (base)
    ├── WatchdogStateError
    └── ReportingError
        └── ReportTimeoutError

Reporting errors describe failures of the reporting collaborator. They are
logged by the interceptor and never raised into the user's invocation.

Usage:
    from lambda_watchdog.exceptions import WatchdogStateError

    if self._closed:
        raise WatchdogStateError("Watchdog already closed")
"""

from lambda_watchdog.exceptions.base import LambdaWatchdogError
from lambda_watchdog.exceptions.errors import (
    ReportingError,
    ReportTimeoutError,
    WatchdogStateError,
)

__all__ = [
    "LambdaWatchdogError",
    "ReportTimeoutError",
    "ReportingError",
    "WatchdogStateError",
]
