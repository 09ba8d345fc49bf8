"""Context variables for invocation-scoped logging data.

A warm Lambda container reuses the process across invocations, so every
field here is reset when the next invocation binds its own values.
"""

from contextvars import ContextVar
from typing import Any

request_id: ContextVar[str] = ContextVar("request_id", default="")

_invocation_fields: ContextVar[dict[str, Any] | None] = ContextVar(
    "invocation_fields", default=None
)


def get_request_id() -> str:
    """Get the AWS request ID of the current invocation."""
    return request_id.get()


def set_request_id(value: str) -> None:
    """Set the AWS request ID for the current invocation.

    Args:
        value: The request ID.
    """
    request_id.set(value)


def get_invocation_fields() -> dict[str, Any]:
    """Get a copy of the fields bound to the current invocation."""
    fields = _invocation_fields.get()
    if fields is None:
        return {}
    return fields.copy()


def bind_invocation_fields(**kwargs: Any) -> None:
    """Add fields to every log line emitted during this invocation.

    Args:
        **kwargs: Key-value pairs to include in log lines.
    """
    current = _invocation_fields.get()
    current = {} if current is None else current.copy()
    current.update(kwargs)
    _invocation_fields.set(current)


def clear_context() -> None:
    """Forget the request ID and all bound fields."""
    request_id.set("")
    _invocation_fields.set(None)
