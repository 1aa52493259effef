"""Shared test doubles for Codepad tests."""

import asyncio
from collections.abc import Callable

import pytest

from src.codepad.core.execution_client import ExecutionClient
from src.codepad.core.models import ExecutionRequest, ExecutionResult
from src.codepad.core.timers import Timer


class ManualHandle:
    """Scheduled callback that only fires when the test says so."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.callback()


class ManualTimer(Timer):
    """Timer that records delays instead of waiting."""

    def __init__(self) -> None:
        self.sleeps: list[float] = []
        self.scheduled: list[ManualHandle] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)

    def call_later(self, seconds: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(seconds, callback)
        self.scheduled.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.scheduled if not h.cancelled and not h.fired]

    def fire_pending(self) -> None:
        for handle in self.pending:
            handle.fire()


class StaticExecutionClient(ExecutionClient):
    """Returns a fixed result or raises a fixed error."""

    def __init__(self, result: ExecutionResult | None = None, error: Exception | None = None):
        self.result = result or ExecutionResult(exit_code=0, raw_output="ok")
        self.error = error
        self.requests: list[ExecutionRequest] = []

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


class GatedExecutionClient(ExecutionClient):
    """Blocks every call until the gate is opened."""

    def __init__(self, result: ExecutionResult | None = None):
        self.result = result or ExecutionResult(exit_code=0, raw_output="done")
        self.gate = asyncio.Event()
        self.calls = 0

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        self.calls += 1
        await self.gate.wait()
        return self.result

    async def wait_for_call(self, count: int = 1) -> None:
        while self.calls < count:
            await asyncio.sleep(0)


@pytest.fixture
def manual_timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def python_request() -> ExecutionRequest:
    return ExecutionRequest(
        language="python",
        version="3.10.0",
        content="print('hi')",
        filename="main.python",
    )


@pytest.fixture
def gated_client() -> GatedExecutionClient:
    return GatedExecutionClient()


@pytest.fixture
def static_client() -> type[StaticExecutionClient]:
    """Factory for clients answering a fixed result or error."""
    return StaticExecutionClient
