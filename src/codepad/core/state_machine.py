"""Run lifecycle: Idle -> Compiling -> Running -> Completed/Failed -> Idle."""

import asyncio
import logging
from collections.abc import Callable

from .errors import CodepadError
from .execution_client import ExecutionClient
from .formatter import format_output
from .models import (
    ExecutionPhase,
    ExecutionRequest,
    ExecutionResult,
    ExecutionSnapshot,
    OutputLine,
)
from .timers import AsyncioTimer, Timer, TimerHandle

logger = logging.getLogger(__name__)

COMPILE_DELAY_SECONDS = 0.5
RESULT_DISPLAY_SECONDS = 2.0

Listener = Callable[[ExecutionSnapshot], None]


class ExecutionStateMachine:
    """Owns the lifecycle of runs and guarantees at most one active run.

    The compile phase is a fixed artificial delay; the execution service does
    not report compilation separately.
    """

    def __init__(
        self,
        client: ExecutionClient,
        timer: Timer | None = None,
        compile_delay: float = COMPILE_DELAY_SECONDS,
        reset_delay: float = RESULT_DISPLAY_SECONDS,
    ):
        """Initialize the state machine.

        Args:
            client: Execution service client
            timer: Clock used for the compile delay and the reset timer
            compile_delay: Seconds spent in the Compiling phase
            reset_delay: Seconds a terminal phase stays visible before Idle
        """
        self.client = client
        self.timer = timer or AsyncioTimer()
        self.compile_delay = compile_delay
        self.reset_delay = reset_delay

        self.phase = ExecutionPhase.IDLE
        self.progress = 0
        self.status = ""
        self.result: ExecutionResult | None = None
        self.output_lines: tuple[OutputLine, ...] | None = None
        self.error: str | None = None

        self._reset_handle: TimerHandle | None = None
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def is_busy(self) -> bool:
        return self.phase in (ExecutionPhase.COMPILING, ExecutionPhase.RUNNING)

    def snapshot(self) -> ExecutionSnapshot:
        return ExecutionSnapshot(
            phase=self.phase,
            progress=self.progress,
            status=self.status,
            output_lines=self.output_lines,
            result=self.result,
            error=self.error,
        )

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def start(self, request: ExecutionRequest) -> ExecutionResult | None:
        """Run a request unless another run is active.

        Returns:
            The execution result, or None if the call was rejected because a
            run is already compiling or running

        Raises:
            CodepadError: If the execution call fails; the machine is already
                in the Failed phase when this (or any other error) propagates
            asyncio.CancelledError: If the run is cancelled; it ends Failed too
        """
        # Guard and transition must stay in one step: no await before _enter.
        if self.is_busy:
            logger.info(f"Run rejected, execution already {self.phase.value}")
            return None

        self._cancel_reset()
        self.result = None
        self.output_lines = None
        self.error = None
        self._enter(ExecutionPhase.COMPILING, 25, "Compiling code...")

        try:
            await self.timer.sleep(self.compile_delay)
            self._enter(ExecutionPhase.RUNNING, 50, "Executing program...")

            result = await self.client.execute(request)

            self.result = result
            self.output_lines = tuple(format_output(result.raw_output, result.succeeded))
            self._enter(ExecutionPhase.RUNNING, 75, "Processing output...")

            if result.succeeded:
                self._enter(ExecutionPhase.COMPLETED, 100, "Completed successfully")
            else:
                logger.info(f"Run failed with exit code {result.exit_code}")
                self._enter(ExecutionPhase.FAILED, self.progress, "Execution failed")
            return result

        except asyncio.CancelledError:
            logger.warning("Execution cancelled")
            self.error = "Execution cancelled"
            self._enter(ExecutionPhase.FAILED, self.progress, "Execution failed")
            raise
        except Exception as e:
            if not isinstance(e, CodepadError):
                logger.exception("Unexpected error during execution")
            logger.error(f"Execution failed: {e}")
            self.error = str(e)
            self._enter(ExecutionPhase.FAILED, self.progress, "Execution failed")
            raise
        finally:
            self._schedule_reset()

    def close(self) -> None:
        """Cancel the pending reset; an in-flight execution call is left alone."""
        self._closed = True
        self._cancel_reset()
        self._listeners.clear()

    def _enter(self, phase: ExecutionPhase, progress: int, status: str) -> None:
        logger.debug(f"Execution phase {self.phase.value} -> {phase.value}")
        self.phase = phase
        self.progress = progress
        self.status = status
        self._notify()

    def _schedule_reset(self) -> None:
        if self.is_busy or self._closed:
            return
        self._cancel_reset()
        self._reset_handle = self.timer.call_later(self.reset_delay, self._reset)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _reset(self) -> None:
        self._reset_handle = None
        self._enter(ExecutionPhase.IDLE, 0, "")

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
