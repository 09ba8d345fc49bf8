"""Log formatters for CloudWatch and local terminals."""

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any, ClassVar

from lambda_watchdog.logging.context import get_invocation_fields, get_request_id

_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the fields passed through ``extra=`` on a log call."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line.

    CloudWatch Logs Insights picks the fields up without a parse step.
    """

    def __init__(
        self,
        *,
        service_name: str = "lambda-watchdog",
        include_timestamp: bool = True,
        include_location: bool = True,
    ) -> None:
        """Initialize the JSON formatter.

        Args:
            service_name: Service identifier for log aggregation.
            include_timestamp: Whether to include timestamp field.
            include_location: Whether to include module/function/line fields.
        """
        super().__init__()
        self._service_name = service_name
        self._include_timestamp = include_timestamp
        self._include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        entry: dict[str, Any] = {}

        if self._include_timestamp:
            entry["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat(
                timespec="milliseconds"
            )

        entry["level"] = record.levelname
        entry["logger"] = record.name
        entry["message"] = record.getMessage()
        entry["service"] = self._service_name

        current_request_id = get_request_id()
        if current_request_id:
            entry["request_id"] = current_request_id

        if self._include_location:
            entry["module"] = record.module
            entry["function"] = record.funcName
            entry["line"] = record.lineno

        entry.update(get_invocation_fields())
        entry.update(_record_extras(record))

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for running handlers locally."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, *, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record for human readability."""
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]

        level = f"{record.levelname:<8}"
        if self._use_colors:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        fields: dict[str, Any] = {}
        current_request_id = get_request_id()
        if current_request_id:
            fields["request_id"] = current_request_id
        fields.update(get_invocation_fields())
        fields.update(_record_extras(record))

        line = f"{timestamp} {level} {record.name}: {record.getMessage()}"
        if fields:
            line += " [" + " ".join(f"{key}={value}" for key, value in fields.items()) + "]"

        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return line
