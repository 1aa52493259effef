"""Editor view controller: the action boundary for load, save and run."""

import logging
from dataclasses import replace
from typing import Any

from .buffer import EditableBuffer
from .errors import CodepadError, NotFoundError
from .execution_client import ExecutionClient
from .formatter import render_output
from .models import (
    ActionOutcome,
    ExecutionRequest,
    Notification,
    OutputConfig,
    Panel,
    Project,
    SaveState,
)
from .notifications import Notifier
from .project_store import ProjectStore
from .selection import (
    DEFAULT_LANGUAGE,
    DEFAULT_SNIPPET,
    DEFAULT_VERSION,
    SelectionTracker,
    resolve_run_target,
)
from .shortcuts import RUN, SAVE, TOGGLE_FULLSCREEN, KeyEvent, KeyEventBus, ShortcutDispatcher
from .state_machine import ExecutionStateMachine
from .timers import Timer
from .view_mode import ViewModeController

logger = logging.getLogger(__name__)


class EditorController:
    """One open editor view.

    Every public action catches ``CodepadError`` here, turns it into a
    notification and an ``ActionOutcome``; nothing propagates to the page.
    """

    def __init__(
        self,
        project_id: str,
        project_store: ProjectStore,
        execution_client: ExecutionClient,
        timer: Timer | None = None,
        notifier: Notifier | None = None,
        compile_delay: float = 0.5,
        reset_delay: float = 2.0,
        breakpoint: int = 768,
        default_language: str = DEFAULT_LANGUAGE,
        default_version: str = DEFAULT_VERSION,
        default_snippet: str = DEFAULT_SNIPPET,
    ):
        """Initialize the editor view.

        Args:
            project_id: Project shown in this view
            project_store: Store used for load and save
            execution_client: Client used by the run state machine
            timer: Clock for the compile delay and reset timer
            notifier: Sink for transient notifications
            compile_delay: Seconds spent in the Compiling phase
            reset_delay: Seconds a finished run stays visible
            breakpoint: Viewport width below which the layout is compact
            default_language: Language used before project metadata loads
            default_version: Version used before project metadata loads
            default_snippet: Code run by run-selection when nothing is selected
        """
        self.project_id = project_id
        self.store = project_store
        self.buffer = project_store.buffer or EditableBuffer()
        self.store.buffer = self.buffer
        self.notifier = notifier or Notifier()
        self.selection = SelectionTracker()
        self.view = ViewModeController(breakpoint=breakpoint)
        self.output_config = OutputConfig()
        self.machine = ExecutionStateMachine(
            execution_client,
            timer=timer,
            compile_delay=compile_delay,
            reset_delay=reset_delay,
        )
        self.default_language = default_language
        self.default_version = default_version
        self.default_snippet = default_snippet
        self.project: Project | None = None

        self.shortcuts = ShortcutDispatcher(
            {
                SAVE: self.save,
                RUN: self.run_project,
                TOGGLE_FULLSCREEN: self.toggle_fullscreen,
            }
        )
        self.key_bus = KeyEventBus()
        self.shortcuts.attach(self.key_bus)
        self.closed = False

    # Widget notifications

    def on_content_changed(self, text: str | None) -> None:
        self.buffer.on_change(text)

    def on_selection_changed(self, text: str | None) -> None:
        self.selection.update(text)

    def on_resize(self, width: int) -> None:
        self.view.resize(width)

    # Actions

    async def open(self) -> ActionOutcome:
        """Load the project into the buffer."""
        try:
            self.project = await self.store.load(self.project_id)
            return ActionOutcome(ok=True, value=self.project)
        except NotFoundError as e:
            self.notifier.error(str(e))
            return ActionOutcome(ok=False, error=e)
        except CodepadError as e:
            logger.error(f"Error fetching project {self.project_id}: {e}")
            self.notifier.error("Failed to load project.")
            return ActionOutcome(ok=False, error=e)

    @property
    def save_state(self) -> SaveState:
        return self.store.save_state(self.project_id)

    async def save(self) -> ActionOutcome:
        """Persist the current buffer unless a save is already in flight."""
        if self.save_state == SaveState.SAVING:
            logger.info(f"Save for {self.project_id} already in flight, skipping")
            return ActionOutcome(ok=False, skipped=True)

        try:
            await self.store.save(self.project_id, self.buffer.text)
        except CodepadError as e:
            self.notifier.error(str(e) or "Failed to save code")
            return ActionOutcome(ok=False, error=e)

        self.notifier.success("Project saved successfully!")
        return ActionOutcome(ok=True)

    def project_request(self) -> ExecutionRequest:
        """Build the request for running the whole buffer."""
        language = self.project.language if self.project else self.default_language
        version = self.project.version if self.project else self.default_version
        return ExecutionRequest(
            language=language,
            version=version,
            content=self.buffer.text,
            filename=f"main.{language}",
        )

    async def run_project(self) -> ActionOutcome:
        return await self._run(self.project_request())

    async def run_selection(self) -> ActionOutcome:
        request = resolve_run_target(
            self.selection.current_selection(),
            self.project.language if self.project else None,
            self.project.version if self.project else None,
            default_snippet=self.default_snippet,
            default_language=self.default_language,
            default_version=self.default_version,
        )
        return await self._run(request)

    async def _run(self, request: ExecutionRequest) -> ActionOutcome:
        try:
            result = await self.machine.start(request)
        except CodepadError as e:
            self.notifier.error(f"Execution failed: {e}")
            return ActionOutcome(ok=False, error=e)

        if result is None:
            return ActionOutcome(ok=False, skipped=True)

        if result.succeeded:
            self.notifier.success("Code executed successfully!", auto_close=2.0)
        else:
            self.notifier.error("Execution failed!", auto_close=3.0)
        return ActionOutcome(ok=True, value=result)

    def toggle_fullscreen(self) -> bool:
        return self.view.toggle_fullscreen()

    async def press_key(self, event: KeyEvent) -> str | None:
        """Deliver a key press to this view and wait for its shortcut action.

        Returns:
            Name of the triggered action, or None when the key is not bound
        """
        action = self.shortcuts.resolve(event)
        self.key_bus.emit(event)
        await self.shortcuts.settle()
        return action

    # Display options

    def show_panel(self, panel: Panel | None = None) -> Panel:
        """Show a panel in compact mode, or flip to the other one."""
        if panel is None:
            return self.view.toggle_panel()
        self.view.show_panel(panel)
        return panel

    def increase_font(self) -> int:
        return self.view.increase_font()

    def decrease_font(self) -> int:
        return self.view.decrease_font()

    def toggle_output_wrap(self) -> bool:
        self.output_config = replace(self.output_config, wrap=not self.output_config.wrap)
        return self.output_config.wrap

    def toggle_line_numbers(self) -> bool:
        self.output_config = replace(
            self.output_config, show_line_numbers=not self.output_config.show_line_numbers
        )
        return self.output_config.show_line_numbers

    def dismiss_notifications(self) -> list[Notification]:
        """Forget notifications the page has already shown."""
        return self.notifier.drain()

    # Lifecycle

    async def aclose(self) -> None:
        """Tear down the view.

        Scheduled shortcut actions are cancelled and the project store is
        closed. The execution client is shared between views and stays open.
        """
        if self.closed:
            return
        self.closed = True
        self.shortcuts.detach()
        self.shortcuts.cancel_pending()
        self.machine.close()
        await self.store.aclose()
        logger.info(f"Closed editor for project {self.project_id}")

    def state(self) -> dict[str, Any]:
        """Serializable view state for the page."""
        snapshot = self.machine.snapshot()
        return {
            "project_id": self.project_id,
            "project": (
                {
                    "name": self.project.name,
                    "language": self.project.language,
                    "version": self.project.version,
                }
                if self.project
                else None
            ),
            "code": self.buffer.text,
            "revision": self.buffer.revision,
            "selection": self.selection.current_selection(),
            "save_state": self.save_state.value,
            "execution": {
                "phase": snapshot.phase.value,
                "progress": snapshot.progress,
                "status": snapshot.status,
                "exit_code": snapshot.result.exit_code if snapshot.result else None,
                "error": snapshot.error,
                "output": (
                    [
                        {
                            "line": line.line_number,
                            "content": line.content,
                            "type": line.kind.value,
                        }
                        for line in snapshot.output_lines
                    ]
                    if snapshot.output_lines is not None
                    else None
                ),
            },
            "output_config": {
                "wrap": self.output_config.wrap,
                "font_size": self.output_config.font_size,
                "show_line_numbers": self.output_config.show_line_numbers,
            },
            "output_text": (
                render_output(list(snapshot.output_lines), self.output_config)
                if snapshot.output_lines is not None
                else None
            ),
            "view": self.view.to_dict(),
            "notifications": [
                {"level": n.level, "message": n.message, "auto_close": n.auto_close}
                for n in self.notifier.items
            ],
        }
