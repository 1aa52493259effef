"""Clock abstraction for the artificial compile delay and reset timers."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None: ...


class Timer(ABC):
    """Schedules delays and delayed callbacks."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        pass

    @abstractmethod
    def call_later(self, seconds: float, callback: Callable[[], None]) -> TimerHandle:
        pass


class AsyncioTimer(Timer):
    """Timer backed by the running asyncio event loop."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def call_later(self, seconds: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(seconds, callback)
