"""
Codepad API Server - hosts editor views for the browser front-end.

Each open editor view is an ``EditorController`` keyed by project id. The page
forwards widget notifications (text, selection, viewport, key presses) and
triggers save/run actions; every response carries the view state so the page
can render progress, output and notifications.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal

import uvicorn
from fastapi import FastAPI, HTTPException, status

from config.settings import (
    API_BASE_URL,
    COMPACT_BREAKPOINT_PX,
    COMPILE_DELAY_SECONDS,
    DEFAULT_LANGUAGE,
    DEFAULT_SNIPPET,
    DEFAULT_VERSION,
    EXECUTION_SERVICE_URL,
    EXECUTION_TIMEOUT_SECONDS,
    LOG_FORMAT,
    LOG_LEVEL,
    RESULT_DISPLAY_SECONDS,
    SERVER_HOST,
    SERVER_PORT,
    SESSION_FILE,
    USE_MOCK_SERVICES,
)

from .core.editor import EditorController
from .core.execution_client import ExecutionClient, create_execution_client
from .core.models import (
    ActionOutcome,
    BufferUpdate,
    KeyPress,
    LoginRequest,
    Panel,
    Project,
    Resize,
    SelectionUpdate,
)
from .core.project_store import create_project_store
from .core.session import Session
from .core.shortcuts import KeyEvent

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# Global component instances - initialized lazily
_session: Session | None = None
_execution_client: ExecutionClient | None = None
_editors: dict[str, EditorController] = {}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close open editor views and the shared execution client on shutdown."""
    global _execution_client

    yield

    for project_id in list(_editors):
        await _editors.pop(project_id).aclose()
    if _execution_client is not None:
        await _execution_client.aclose()
        _execution_client = None
    logger.info("System components shut down")


# Initialize FastAPI application
app = FastAPI(
    title="Codepad Editor Service",
    description="Execution and persistence orchestration for the in-browser code editor",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Projects served when USE_MOCK_SERVICES is enabled
_demo_projects: dict[str, Project] = {
    "demo": Project(
        id="demo",
        name="Hello Codepad",
        code="print('Hello World')\n",
        language="python",
        version="3.10.0",
    )
}


def _initialize_components() -> tuple[Session, ExecutionClient]:
    """
    Initialize and return the shared components.

    Returns:
        Tuple containing the session and the shared execution client
    """
    global _session, _execution_client

    if _session is None or _execution_client is None:
        logger.info("Initializing system components...")
        _session = _session or Session.load(SESSION_FILE)
        _execution_client = create_execution_client(
            use_mock=USE_MOCK_SERVICES,
            url=EXECUTION_SERVICE_URL,
            timeout=EXECUTION_TIMEOUT_SECONDS,
        )
        client_type = type(_execution_client).__name__.replace("ExecutionClient", "")
        logger.info(f"System components initialized successfully (execution: {client_type})")

    assert _session is not None
    assert _execution_client is not None
    return _session, _execution_client


def _create_editor(project_id: str) -> EditorController:
    session, execution_client = _initialize_components()
    store = create_project_store(
        session,
        use_memory=USE_MOCK_SERVICES,
        base_url=API_BASE_URL,
        projects=_demo_projects,
    )
    editor = EditorController(
        project_id,
        store,
        execution_client,
        compile_delay=COMPILE_DELAY_SECONDS,
        reset_delay=RESULT_DISPLAY_SECONDS,
        breakpoint=COMPACT_BREAKPOINT_PX,
        default_language=DEFAULT_LANGUAGE,
        default_version=DEFAULT_VERSION,
        default_snippet=DEFAULT_SNIPPET,
    )
    return editor


def _get_editor(project_id: str) -> EditorController:
    editor = _editors.get(project_id)
    if editor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No open editor for project {project_id}",
        )
    return editor


def _respond(editor: EditorController, outcome: ActionOutcome | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"state": editor.state()}
    if outcome is not None:
        body.update(
            {
                "ok": outcome.ok,
                "skipped": outcome.skipped,
                "error": outcome.error_message,
            }
        )
    return body


@app.get("/health")
async def health_check() -> dict[str, str]:
    """System health check endpoint."""
    return {"status": "healthy", "service": "codepad-editor"}


@app.get("/session")
async def get_session() -> dict[str, Any]:
    session, _ = _initialize_components()
    return {
        "logged_in": session.is_logged_in,
        "full_name": session.full_name,
        "theme": session.theme.value,
        "editor_theme": session.editor_theme,
    }


@app.post("/session/login")
async def login(request: LoginRequest) -> dict[str, Any]:
    session, _ = _initialize_components()
    session.login(request.token, request.full_name)
    return await get_session()


@app.post("/session/logout")
async def logout() -> dict[str, Any]:
    session, _ = _initialize_components()
    session.logout()
    return await get_session()


@app.post("/session/theme")
async def toggle_theme() -> dict[str, Any]:
    session, _ = _initialize_components()
    session.toggle_theme()
    return await get_session()


@app.post("/editors/{project_id}", status_code=status.HTTP_201_CREATED)
async def open_editor(project_id: str) -> dict[str, Any]:
    """
    Open an editor view and load its project.

    Re-opening a project replaces the previous view after tearing it down.
    """
    previous = _editors.pop(project_id, None)
    if previous is not None:
        await previous.aclose()

    editor = _create_editor(project_id)
    _editors[project_id] = editor
    outcome = await editor.open()
    return _respond(editor, outcome)


@app.get("/editors/{project_id}")
async def get_editor_state(project_id: str) -> dict[str, Any]:
    return _respond(_get_editor(project_id))


@app.delete("/editors/{project_id}")
async def close_editor(project_id: str) -> dict[str, str]:
    editor = _get_editor(project_id)
    del _editors[project_id]
    await editor.aclose()
    return {"status": "closed", "project_id": project_id}


@app.put("/editors/{project_id}/buffer")
async def update_buffer(project_id: str, update: BufferUpdate) -> dict[str, Any]:
    editor = _get_editor(project_id)
    editor.on_content_changed(update.text)
    return _respond(editor)


@app.put("/editors/{project_id}/selection")
async def update_selection(project_id: str, update: SelectionUpdate) -> dict[str, Any]:
    editor = _get_editor(project_id)
    editor.on_selection_changed(update.text)
    return _respond(editor)


@app.put("/editors/{project_id}/viewport")
async def resize_viewport(project_id: str, resize: Resize) -> dict[str, Any]:
    editor = _get_editor(project_id)
    editor.on_resize(resize.width)
    return _respond(editor)


@app.post("/editors/{project_id}/save")
async def save_project(project_id: str) -> dict[str, Any]:
    editor = _get_editor(project_id)
    return _respond(editor, await editor.save())


@app.post("/editors/{project_id}/run")
async def run_project(project_id: str) -> dict[str, Any]:
    editor = _get_editor(project_id)
    return _respond(editor, await editor.run_project())


@app.post("/editors/{project_id}/run-selection")
async def run_selection(project_id: str) -> dict[str, Any]:
    editor = _get_editor(project_id)
    return _respond(editor, await editor.run_selection())


@app.post("/editors/{project_id}/keys")
async def press_key(project_id: str, press: KeyPress) -> dict[str, Any]:
    """Deliver a key press to the view's key bus."""
    editor = _get_editor(project_id)
    event = KeyEvent(
        key=press.key,
        ctrl=press.ctrl,
        shift=press.shift,
        alt=press.alt,
        meta=press.meta,
    )
    action = await editor.press_key(event)
    body = _respond(editor)
    body.update({"action": action, "default_prevented": event.default_prevented})
    return body


@app.post("/editors/{project_id}/panel")
async def show_panel(project_id: str, panel: Panel | None = None) -> dict[str, Any]:
    """Show the given compact-mode panel, or flip panels when none is given."""
    editor = _get_editor(project_id)
    editor.show_panel(panel)
    return _respond(editor)


@app.post("/editors/{project_id}/fullscreen")
async def toggle_fullscreen(project_id: str) -> dict[str, Any]:
    editor = _get_editor(project_id)
    editor.toggle_fullscreen()
    return _respond(editor)


@app.post("/editors/{project_id}/font/{direction}")
async def change_font(project_id: str, direction: Literal["up", "down"]) -> dict[str, Any]:
    editor = _get_editor(project_id)
    if direction == "up":
        editor.increase_font()
    else:
        editor.decrease_font()
    return _respond(editor)


@app.post("/editors/{project_id}/output-config/{option}")
async def toggle_output_option(
    project_id: str, option: Literal["wrap", "line-numbers"]
) -> dict[str, Any]:
    """Toggle output word wrap or line numbers."""
    editor = _get_editor(project_id)
    if option == "wrap":
        editor.toggle_output_wrap()
    else:
        editor.toggle_line_numbers()
    return _respond(editor)


@app.delete("/editors/{project_id}/notifications")
async def dismiss_notifications(project_id: str) -> dict[str, Any]:
    """Drop notifications the page has displayed."""
    editor = _get_editor(project_id)
    dismissed = editor.dismiss_notifications()
    body = _respond(editor)
    body["dismissed"] = len(dismissed)
    return body


def main():
    """Run the FastAPI server."""
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)


if __name__ == "__main__":
    main()
