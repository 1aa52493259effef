"""Transient user-facing notifications."""

import logging
from collections import deque

from .models import Notification

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "error": logging.WARNING,
}


class Notifier:
    """Keeps the most recent notifications for the view to display."""

    def __init__(self, max_items: int = 20):
        self._items: deque[Notification] = deque(maxlen=max_items)

    def notify(self, level: str, message: str, auto_close: float | None = None) -> Notification:
        notification = Notification(level=level, message=message, auto_close=auto_close)
        self._items.append(notification)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), f"[{level}] {message}")
        return notification

    def success(self, message: str, auto_close: float | None = None) -> Notification:
        return self.notify("success", message, auto_close)

    def error(self, message: str, auto_close: float | None = None) -> Notification:
        return self.notify("error", message, auto_close)

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        """Return and forget pending notifications."""
        items = list(self._items)
        self._items.clear()
        return items
