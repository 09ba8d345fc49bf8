"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from lambda_watchdog.config import LambdaEnvironment, WatchdogSettings
from lambda_watchdog.reporting import ReportLevel


@pytest.fixture(autouse=True)
def _clear_environment(monkeypatch):
    """Clear environment variables that affect settings."""
    env_vars_to_clear = [
        "CAPTURE_ERRORS",
        "CAPTURE_TIMEOUT_WARNINGS",
        "CAPTURE_MEMORY_WARNINGS",
        "TIMEOUT_MARGIN_MS",
        "MEMORY_POLL_INTERVAL_MS",
        "MEMORY_WARNING_THRESHOLD",
        "REPORT_ACK_TIMEOUT_SECONDS",
        "SERVICE_NAME",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "INCLUDE_TIMESTAMP",
        "INCLUDE_LOCATION",
        "AWS_LAMBDA_FUNCTION_NAME",
        "AWS_LAMBDA_FUNCTION_VERSION",
        "AWS_LAMBDA_LOG_STREAM_NAME",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)


class FakeTimer:
    """Stand-in for asyncio.TimerHandle."""

    def __init__(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.delay_ms = round(delay_seconds * 1000)
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        assert not self.cancelled, "cancelled timer fired"
        self.fired = True
        self.callback()


class FakeLoop:
    """Records call_later requests so tests fire timers by hand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]


class RecordingReporter:
    """Reporter stub that records calls and resolves acknowledgments on demand."""

    def __init__(self, *, auto_ack: bool = True) -> None:
        self.auto_ack = auto_ack
        self.exceptions: list[BaseException] = []
        self.messages: list[tuple[str, ReportLevel, dict[str, Any] | None]] = []
        self.contexts: list[dict[str, Any]] = []
        self.acknowledgments: list[asyncio.Future[None]] = []

    def _acknowledgment(self) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        future: asyncio.Future[None] = loop.create_future()
        if self.auto_ack:
            future.set_result(None)
        self.acknowledgments.append(future)
        return future

    def capture_exception(self, error: BaseException) -> Any:
        self.exceptions.append(error)
        return self._acknowledgment()

    def capture_message(
        self,
        message: str,
        *,
        level: ReportLevel,
        extra: dict[str, Any] | None = None,
    ) -> Any:
        self.messages.append((message, level, extra))
        return self._acknowledgment()

    def merge_context(
        self,
        *,
        extra: dict[str, Any] | None = None,
        tags: dict[str, Any] | None = None,
    ) -> None:
        self.contexts.append({"extra": extra, "tags": tags})

    @property
    def report_count(self) -> int:
        return len(self.exceptions) + len(self.messages)


def make_context(remaining_ms: int = 10000, memory_limit_mb: int = 128) -> MagicMock:
    context = MagicMock()
    context.aws_request_id = "test-request-id"
    context.function_name = "test-function"
    context.function_version = "$LATEST"
    context.memory_limit_in_mb = memory_limit_mb
    context.get_remaining_time_in_millis.return_value = remaining_ms
    return context


@pytest.fixture()
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def settings() -> WatchdogSettings:
    return WatchdogSettings()


@pytest.fixture()
def lambda_environment() -> LambdaEnvironment:
    return LambdaEnvironment(
        function_name="orders-processor",
        function_version="7",
        log_stream_name="2026/10/19/[7]abcdef",
    )


@pytest.fixture()
def local_environment() -> LambdaEnvironment:
    return LambdaEnvironment()


@pytest.fixture()
def context_factory() -> Callable[..., MagicMock]:
    return make_context


@pytest.fixture()
def pending_reporter() -> RecordingReporter:
    """Reporter whose acknowledgments stay unresolved until the test resolves them."""
    return RecordingReporter(auto_ack=False)
