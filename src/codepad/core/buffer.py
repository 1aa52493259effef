"""Live, possibly unsaved editor text."""

import logging

logger = logging.getLogger(__name__)


class EditableBuffer:
    """Single source of truth for the text shown by the editing widget."""

    def __init__(self, text: str = ""):
        self._text = text
        self.revision = 0

    @property
    def text(self) -> str:
        return self._text

    def on_change(self, text: str | None) -> None:
        """Apply a content-changed notification from the widget."""
        self._text = text or ""
        self.revision += 1

    def load(self, text: str) -> None:
        """Replace the content with freshly loaded project code."""
        logger.debug(f"Loading {len(text)} characters into buffer")
        self._text = text
        self.revision += 1
