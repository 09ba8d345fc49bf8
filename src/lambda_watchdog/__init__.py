"""Lifecycle instrumentation for AWS Lambda invocations.

Reports handler errors before the invocation completes and warns about
invocations that are close to their time or memory limits.

Usage:
    from lambda_watchdog import LoggingReporter, instrument
    from lambda_watchdog.logging import setup_logging

    setup_logging()
    reporter = LoggingReporter()

    @instrument(reporter)
    async def handler(event, context):
        ...
"""

from lambda_watchdog.config import (
    LambdaEnvironment,
    WatchdogSettings,
    get_lambda_environment,
    get_settings,
)
from lambda_watchdog.instrument import Invocation, init, instrument
from lambda_watchdog.interceptor import (
    CompletionInterceptor,
    is_background_fault,
    mark_background_fault,
)
from lambda_watchdog.reporting import LoggingReporter, Reporter, ReportEvent, ReportLevel
from lambda_watchdog.watchdog import InvocationBudget, Watchdog, resident_memory_mb

__all__ = [
    "CompletionInterceptor",
    "Invocation",
    "InvocationBudget",
    "LambdaEnvironment",
    "LoggingReporter",
    "ReportEvent",
    "ReportLevel",
    "Reporter",
    "Watchdog",
    "WatchdogSettings",
    "get_lambda_environment",
    "get_settings",
    "init",
    "instrument",
    "is_background_fault",
    "mark_background_fault",
    "resident_memory_mb",
]
