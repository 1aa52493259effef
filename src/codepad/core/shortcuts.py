"""Keyboard shortcuts for the editor view."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[object] | object]
KeyListener = Callable[["KeyEvent"], None]

SAVE = "save"
RUN = "run"
TOGGLE_FULLSCREEN = "toggle-fullscreen"

DEFAULT_BINDINGS = {
    "ctrl+s": SAVE,
    "ctrl+b": RUN,
    "ctrl+f": TOGGLE_FULLSCREEN,
}


@dataclass(frozen=True)
class KeyCombo:
    """A key plus the modifiers that must be held."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False

    @classmethod
    def parse(cls, text: str) -> "KeyCombo":
        """Parse a combo such as ``"ctrl+s"``."""
        *modifiers, key = [part.strip().lower() for part in text.split("+")]
        unknown = set(modifiers) - {"ctrl", "shift", "alt", "meta"}
        if unknown or not key:
            raise ValueError(f"Invalid key combo: {text!r}")
        return cls(
            key=key,
            ctrl="ctrl" in modifiers,
            shift="shift" in modifiers,
            alt="alt" in modifiers,
            meta="meta" in modifiers,
        )

    def matches(self, event: "KeyEvent") -> bool:
        return (
            event.key.lower() == self.key
            and event.ctrl == self.ctrl
            and event.shift == self.shift
            and event.alt == self.alt
            and event.meta == self.meta
        )


@dataclass
class KeyEvent:
    """A key press delivered by the page."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class KeyEventBus:
    """Key event source for one editor view.

    Each view owns its bus, so an event only reaches the view it was
    delivered to.
    """

    def __init__(self) -> None:
        self._listeners: list[KeyListener] = []

    def add_listener(self, listener: KeyListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: KeyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: KeyEvent) -> KeyEvent:
        for listener in list(self._listeners):
            listener(event)
        return event

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class ShortcutDispatcher:
    """Maps key combos to actions.

    The dispatcher is attached once. Actions are looked up at dispatch time
    and read whatever state they need when invoked, so there is nothing to
    re-bind when the editor state changes.
    """

    def __init__(self, actions: dict[str, Action], bindings: dict[str, str] | None = None):
        """Initialize the dispatcher.

        Args:
            actions: Action name to callable (sync or async)
            bindings: Combo text to action name; defaults to save/run/fullscreen
        """
        self.actions = actions
        self.bindings: list[tuple[KeyCombo, str]] = [
            (KeyCombo.parse(combo), name)
            for combo, name in (bindings or DEFAULT_BINDINGS).items()
        ]
        self._bus: KeyEventBus | None = None
        self._tasks: set[asyncio.Task] = set()

    def resolve(self, event: KeyEvent) -> str | None:
        """Return the action bound to an event, if any."""
        for combo, name in self.bindings:
            if combo.matches(event):
                return name
        return None

    def attach(self, bus: KeyEventBus) -> None:
        if self._bus is bus:
            return
        self.detach()
        bus.add_listener(self.handle_event)
        self._bus = bus

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.remove_listener(self.handle_event)
            self._bus = None

    def handle_event(self, event: KeyEvent) -> None:
        """Key listener: suppress default handling and schedule the action."""
        name = self.resolve(event)
        if name is None:
            return
        event.prevent_default()

        outcome = self._invoke(name)
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def settle(self) -> None:
        """Wait for actions scheduled by ``handle_event`` to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_pending(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    async def dispatch(self, event: KeyEvent) -> str | None:
        """Handle an event and wait for its action to finish.

        Returns:
            Name of the action that ran, or None when nothing is bound
        """
        name = self.resolve(event)
        if name is None:
            return None
        event.prevent_default()

        outcome = self._invoke(name)
        if inspect.isawaitable(outcome):
            await outcome
        return name

    def _invoke(self, name: str) -> object:
        action = self.actions.get(name)
        if action is None:
            logger.warning(f"No action registered for shortcut {name}")
            return None
        logger.debug(f"Shortcut triggered: {name}")
        return action()

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Shortcut action failed: {error}", exc_info=error)
