"""Invocation bootstrap and the Lambda handler decorator.

Usage:
    from lambda_watchdog import LoggingReporter, instrument

    reporter = LoggingReporter()

    @instrument(reporter)
    async def handler(event, context):
        return await process(event)
"""

import asyncio
import copy
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import wraps
from typing import Any

from lambda_watchdog.config import (
    LambdaEnvironment,
    WatchdogSettings,
    get_lambda_environment,
    get_settings,
    validate_startup_config,
)
from lambda_watchdog.interceptor import CompletionInterceptor
from lambda_watchdog.logging.adapters.lambda_adapter import bind_lambda_context
from lambda_watchdog.reporting import Reporter
from lambda_watchdog.types import CompletionCallback, DoneCallback, LambdaContext, LambdaEvent
from lambda_watchdog.watchdog import Watchdog

logger = logging.getLogger(__name__)

AsyncHandler = Callable[[LambdaEvent, LambdaContext], Awaitable[Any]]


@dataclass
class Invocation:
    """One instrumented invocation.

    ``done``, ``fail`` and ``succeed`` all go through the same wrapped
    callback, so reporting behaves the same whichever one the handler uses.
    """

    event: LambdaEvent
    context: LambdaContext
    watchdog: Watchdog
    done: CompletionCallback
    _interceptor: CompletionInterceptor = field(repr=False)

    async def fail(self, error: object) -> None:
        await self._interceptor.fail(error)

    async def succeed(self, data: object = None) -> None:
        await self._interceptor.succeed(data)


def init(
    event: LambdaEvent,
    context: LambdaContext,
    done: DoneCallback,
    reporter: Reporter,
    settings: WatchdogSettings | None = None,
    *,
    environment: LambdaEnvironment | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Invocation:
    """Instrument a single invocation.

    Attaches a copy of the event (and, under Lambda, the function tags) to
    the reporter context, wraps ``done``, and starts the watchdog. Outside
    Lambda no checks are scheduled.

    Args:
        event: The invocation payload.
        context: Lambda context object.
        done: Platform completion callback ``(error, data)``.
        reporter: Reporting collaborator shared by the process.
        settings: Loaded from the environment if not provided.
        environment: Lambda identifiers. Loaded from the environment if not provided.
        loop: Event loop for the watchdog timers. Defaults to the running loop.

    Returns:
        The instrumented invocation.
    """
    settings = settings or get_settings()
    environment = environment or get_lambda_environment()

    bind_lambda_context(context)

    watchdog = Watchdog(reporter, settings, context, loop=loop)
    interceptor = CompletionInterceptor(reporter, settings, watchdog)
    wrapped_done = interceptor.wrap(done)

    reporter.merge_context(extra={"event": copy.deepcopy(event)})
    if environment.is_lambda:
        reporter.merge_context(tags=environment.tags)
        if settings.watches_enabled:
            watchdog.start()
    else:
        logger.debug("Not running under Lambda, watchdog disabled")

    return Invocation(
        event=event,
        context=context,
        watchdog=watchdog,
        done=wrapped_done,
        _interceptor=interceptor,
    )


def instrument(
    reporter: Reporter,
    settings: WatchdogSettings | None = None,
    *,
    environment: LambdaEnvironment | None = None,
) -> Callable[[AsyncHandler], Callable[[LambdaEvent, LambdaContext], Any]]:
    """Decorate an async handler into an instrumented Lambda entrypoint.

    The returned handler is synchronous, as the Lambda Python runtime
    expects. Its return value or raised exception is exactly the one the
    decorated coroutine produced.

    Args:
        reporter: Reporting collaborator, created once per process.
        settings: Validated from the environment when the handler is
            decorated if not provided, so bad configuration fails the cold start.
        environment: Lambda identifiers. Loaded from the environment if not provided.
    """

    def decorator(func: AsyncHandler) -> Callable[[LambdaEvent, LambdaContext], Any]:
        resolved_settings = settings or validate_startup_config()

        @wraps(func)
        def handler(event: LambdaEvent, context: LambdaContext) -> Any:
            return asyncio.run(
                _run(func, event, context, reporter, resolved_settings, environment)
            )

        return handler

    return decorator


async def _run(
    func: AsyncHandler,
    event: LambdaEvent,
    context: LambdaContext,
    reporter: Reporter,
    settings: WatchdogSettings,
    environment: LambdaEnvironment | None,
) -> Any:
    outcome: dict[str, object] = {}

    def record_outcome(error: object, data: object) -> None:
        # Errors are re-raised from the handler's own frame below.
        outcome["data"] = data

    invocation = init(
        event, context, record_outcome, reporter, settings, environment=environment
    )

    try:
        result = await func(event, context)
    except Exception as error:
        await invocation.fail(error)
        raise

    await invocation.succeed(result)
    return outcome["data"]
