"""Type definitions for Lambda contexts and completion callbacks."""

from collections.abc import Awaitable, Callable
from typing import Protocol


class LambdaContext(Protocol):
    """AWS Lambda context object interface."""

    function_name: str
    function_version: str
    memory_limit_in_mb: int
    aws_request_id: str
    log_stream_name: str

    def get_remaining_time_in_millis(self) -> int:
        """Return remaining execution time in milliseconds."""
        ...


# For truly dynamic JSON data
LambdaEvent = dict[str, object]

# Platform completion hook: done(error, data). May be sync or async.
DoneCallback = Callable[[object, object], Awaitable[None] | None]

# The replacement produced by the interceptor is always awaitable.
CompletionCallback = Callable[[object, object], Awaitable[None]]
