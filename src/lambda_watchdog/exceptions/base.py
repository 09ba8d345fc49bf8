"""Base exception class for the lambda watchdog.

Error codes are stable strings so log queries can filter on them.
"""

from typing import Any, ClassVar


class LambdaWatchdogError(Exception):
    """Base exception for all lambda watchdog errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        context: Additional debugging information.
    """

    error_code: ClassVar[str] = "WATCHDOG_ERROR"

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            context: Additional key-value pairs for debugging.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_log_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging.

        Returns:
            Dictionary with full error details, safe to pass as logging extra.
        """
        return {
            "error_code": self.error_code,
            "error_message": self.message,
            "error_context": self.context,
            "exception_type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        """Return string representation."""
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )
