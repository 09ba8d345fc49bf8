"""Lambda adapter for binding logging context at invocation start."""

from lambda_watchdog.logging.context import (
    bind_invocation_fields,
    clear_context,
    set_request_id,
)
from lambda_watchdog.types import LambdaContext


def bind_lambda_context(context: LambdaContext) -> None:
    """Bind the invocation's identity into the logging context.

    Fields from a previous invocation in the same warm container are
    dropped first.

    Args:
        context: Lambda context object.
    """
    clear_context()
    set_request_id(context.aws_request_id)
    bind_invocation_fields(
        function_name=context.function_name,
        function_version=context.function_version,
        memory_limit_in_mb=context.memory_limit_in_mb,
    )
