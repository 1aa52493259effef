"""Explicit session object for the token and theme preference.

The state is persisted as a small JSON document. Concurrent writers (several
open views) overwrite each other; last write wins.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .models import Theme

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
LOGGED_IN_KEY = "isLoggedIn"
FULL_NAME_KEY = "fullName"
THEME_KEY = "theme"


class Session:
    """Session token and UI preferences shared by editor views."""

    def __init__(self, path: Path | str | None = None):
        """Initialize the session.

        Args:
            path: JSON file backing the session; None keeps it in memory only
        """
        self.path = Path(path) if path is not None else None
        self.token: str | None = None
        self.full_name: str | None = None
        self.theme: Theme = Theme.DARK

    @classmethod
    def load(cls, path: Path | str | None) -> "Session":
        """Read a session from its backing file, if present."""
        session = cls(path)
        if session.path is None or not session.path.exists():
            return session

        try:
            data = json.loads(session.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {session.path}: {e}")
            return session

        if data.get(LOGGED_IN_KEY) == "true":
            session.token = data.get(TOKEN_KEY)
            session.full_name = data.get(FULL_NAME_KEY)
        try:
            session.theme = Theme(data.get(THEME_KEY, Theme.DARK.value))
        except ValueError:
            session.theme = Theme.DARK
        return session

    @property
    def is_logged_in(self) -> bool:
        return self.token is not None

    @property
    def editor_theme(self) -> str:
        """Theme name understood by the editing widget."""
        return "vs-dark" if self.theme == Theme.DARK else "light"

    def login(self, token: str, full_name: str | None = None) -> None:
        """Store the token handed over after authentication."""
        self.token = token
        self.full_name = full_name
        logger.info("Session token stored")
        self._persist()

    def logout(self) -> None:
        self.token = None
        self.full_name = None
        logger.info("Session cleared")
        self._persist()

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme
        self._persist()

    def toggle_theme(self) -> Theme:
        """Flip between dark and light and return the new theme."""
        self.set_theme(Theme.LIGHT if self.theme == Theme.DARK else Theme.DARK)
        return self.theme

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {THEME_KEY: self.theme.value}
        if self.token is not None:
            data[TOKEN_KEY] = self.token
            data[LOGGED_IN_KEY] = "true"
        if self.full_name:
            data[FULL_NAME_KEY] = self.full_name
        return data

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
