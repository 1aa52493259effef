"""Selection tracking and run-target resolution."""

import logging

from .models import ExecutionRequest

logger = logging.getLogger(__name__)

DEFAULT_SNIPPET = "print('Hello World')"
DEFAULT_LANGUAGE = "python"
DEFAULT_VERSION = "3.9.0"


class SelectionTracker:
    """Tracks the editing widget's latest selection."""

    def __init__(self) -> None:
        self._selection: str | None = None

    def update(self, text: str | None) -> None:
        """Apply a selection-changed notification; empty means no selection."""
        self._selection = text or None

    def current_selection(self) -> str | None:
        return self._selection


def resolve_run_target(
    selection: str | None,
    fallback_language: str | None,
    fallback_version: str | None,
    default_snippet: str = DEFAULT_SNIPPET,
    default_language: str = DEFAULT_LANGUAGE,
    default_version: str = DEFAULT_VERSION,
) -> ExecutionRequest:
    """Build the request for a run-selection action.

    Without a selection the default snippet runs; without project metadata
    the default language and version apply.

    Args:
        selection: Selected text, or None
        fallback_language: Language of the loaded project, or None
        fallback_version: Version of the loaded project, or None

    Returns:
        Request with no filename
    """
    if selection is None:
        logger.debug("No selection, running default snippet")

    return ExecutionRequest(
        language=fallback_language or default_language,
        version=fallback_version or default_version,
        content=selection or default_snippet,
    )
