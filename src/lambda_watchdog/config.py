"""Watchdog configuration using Pydantic BaseSettings.

All settings are loaded from environment variables.
No .env files - Lambda configuration comes from the function environment.

Usage:
    from lambda_watchdog.config import get_settings

    settings = get_settings()
    print(settings.capture_errors)
    print(settings.memory_warning_threshold)
"""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    """Valid log formats."""

    JSON = "json"
    HUMAN = "human"


class WatchdogSettings(BaseSettings):
    """Watchdog settings loaded from environment variables.

    Attributes:
        capture_errors: Report errors passed to the completion callback.
        capture_timeout_warnings: Schedule the time-warning and time-critical checks.
        capture_memory_warnings: Schedule the memory poll.
        timeout_margin_ms: How long before the deadline the time-critical check fires.
        memory_poll_interval_ms: Delay before the first memory poll and between polls.
        memory_warning_threshold: Fraction of the memory ceiling that triggers a warning.
        report_ack_timeout_seconds: Upper bound on waiting for an error report
            acknowledgment. None waits indefinitely.
        service_name: Service identifier for log aggregation.
        log_level: Logging level.
        log_format: Output format - json for Lambda, human for local runs.
        include_timestamp: Whether log lines carry a timestamp.
        include_location: Whether log lines carry module/function/line.
    """

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )

    # Capture switches
    capture_errors: bool = Field(default=True)
    capture_timeout_warnings: bool = Field(default=True)
    capture_memory_warnings: bool = Field(default=True)

    # Watchdog tuning
    timeout_margin_ms: int = Field(default=500, ge=0)
    memory_poll_interval_ms: int = Field(default=500, ge=1)
    memory_warning_threshold: float = Field(default=0.75, gt=0, le=1)
    report_ack_timeout_seconds: float | None = Field(default=None, gt=0)

    # Logging
    service_name: str = Field(default="lambda-watchdog", min_length=1)
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default=LogFormat.JSON)
    include_timestamp: bool = Field(default=True)
    include_location: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed:
            error_message = f"log_level must be one of {allowed}, got '{value}'"
            raise ValueError(error_message)
        return upper_value

    @property
    def watches_enabled(self) -> bool:
        """Check if any watchdog check is switched on."""
        return self.capture_timeout_warnings or self.capture_memory_warnings


class LambdaEnvironment(BaseSettings):
    """Identifiers the Lambda runtime exports into the function environment.

    Reads AWS_LAMBDA_FUNCTION_NAME, AWS_LAMBDA_FUNCTION_VERSION and
    AWS_LAMBDA_LOG_STREAM_NAME. A missing function name means the code is
    not running under Lambda.
    """

    model_config = SettingsConfigDict(
        env_prefix="AWS_LAMBDA_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    function_name: str | None = Field(default=None)
    function_version: str | None = Field(default=None)
    log_stream_name: str | None = Field(default=None)

    @property
    def is_lambda(self) -> bool:
        """Check if running under the Lambda runtime."""
        return bool(self.function_name)

    @property
    def tags(self) -> dict[str, str | None]:
        """Tags identifying the function in reports."""
        return {
            "Lambda": self.function_name,
            "Version": self.function_version,
            "LogStream": self.log_stream_name,
        }


@lru_cache
def get_settings() -> WatchdogSettings:
    """Get cached settings instance.

    Returns:
        Cached WatchdogSettings instance.
    """
    return WatchdogSettings()


@lru_cache
def get_lambda_environment() -> LambdaEnvironment:
    """Get cached Lambda environment instance."""
    return LambdaEnvironment()


def validate_startup_config() -> WatchdogSettings:
    """Validate configuration on cold start.

    Returns:
        Validated WatchdogSettings instance.

    Raises:
        pydantic.ValidationError: If configuration is invalid.
    """
    return get_settings()
