"""Integration tests for the complete editor workflow."""

import asyncio

import pytest

from src.codepad.core.editor import EditorController
from src.codepad.core.errors import NetworkError, ValidationError
from src.codepad.core.execution_client import MockExecutionClient
from src.codepad.core.models import ExecutionPhase, OutputKind, Project, SaveState
from src.codepad.core.project_store import HttpProjectStore, InMemoryProjectStore
from src.codepad.core.session import Session
from src.codepad.core.shortcuts import KeyEvent

pytestmark = pytest.mark.integration


class GatedStore(InMemoryProjectStore):
    """In-memory store whose writes wait for a gate."""

    def __init__(self, projects):
        super().__init__(projects=projects)
        self.gate = asyncio.Event()
        self.writes: list[str] = []

    async def _write(self, project_id: str, code: str) -> None:
        self.writes.append(code)
        await self.gate.wait()
        await super()._write(project_id, code)


class FailingStore(InMemoryProjectStore):
    """In-memory store whose writes fail with a fixed error."""

    def __init__(self, projects, error):
        super().__init__(projects=projects)
        self.error = error

    async def _write(self, project_id: str, code: str) -> None:
        raise self.error


class TestEditorWorkflow:
    """Integration tests for EditorController."""

    def setup_method(self):
        """Set up a project store and editor before each test."""
        self.projects = {
            "p1": Project(
                id="p1",
                name="Greeter",
                code="print('Hello World')\n",
                language="python",
                version="3.10.0",
            )
        }
        self.client = MockExecutionClient()

    def _editor(self, store, timer) -> EditorController:
        return EditorController("p1", store, self.client, timer=timer)

    @pytest.mark.asyncio
    async def test_open_edit_save_run(self, manual_timer):
        """Test the full path: load, edit, save, run."""
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)

        opened = await editor.open()
        assert opened.ok
        assert editor.buffer.text == "print('Hello World')\n"

        editor.on_content_changed("print('Hi there')\n\n")
        saved = await editor.save()
        assert saved.ok
        assert self.projects["p1"].code == "print('Hi there')"
        assert editor.buffer.text == "print('Hi there')\n\n"

        ran = await editor.run_project()
        assert ran.ok
        assert self.client.requests[-1].filename == "main.python"
        assert self.client.requests[-1].version == "3.10.0"
        assert editor.machine.phase == ExecutionPhase.COMPLETED

        state = editor.state()
        assert state["execution"]["output"][0] == {
            "line": 1,
            "content": "Hi there",
            "type": "output",
        }
        assert [n["message"] for n in state["notifications"]] == [
            "Project saved successfully!",
            "Code executed successfully!",
        ]

        manual_timer.fire_pending()
        assert editor.state()["execution"]["phase"] == "idle"

    @pytest.mark.asyncio
    async def test_failed_run_renders_error_lines(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        await editor.open()
        editor.on_content_changed("raise RuntimeError('x')")

        outcome = await editor.run_project()

        assert outcome.ok
        assert outcome.value.succeeded is False
        assert editor.machine.phase == ExecutionPhase.FAILED
        assert {line.kind for line in editor.machine.output_lines} == {OutputKind.ERROR}
        assert editor.notifier.items[-1].message == "Execution failed!"

        manual_timer.fire_pending()
        assert (await editor.run_project()).ok

    @pytest.mark.asyncio
    async def test_run_selection_defaults_before_load(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)

        outcome = await editor.run_selection()

        request = self.client.requests[-1]
        assert outcome.ok
        assert request.content == "print('Hello World')"
        assert (request.language, request.version) == ("python", "3.9.0")
        assert request.filename is None

    @pytest.mark.asyncio
    async def test_run_selection_uses_selected_text(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        await editor.open()
        editor.on_selection_changed("print('selected')")

        await editor.run_selection()

        request = self.client.requests[-1]
        assert request.content == "print('selected')"
        assert request.version == "3.10.0"
        assert editor.machine.output_lines[0].content == "selected"

    @pytest.mark.asyncio
    async def test_open_missing_project_notifies(self, manual_timer):
        editor = EditorController("nope", InMemoryProjectStore(), self.client, timer=manual_timer)

        outcome = await editor.open()

        assert not outcome.ok
        assert editor.notifier.items[-1].message == "Project not found !"
        assert editor.buffer.text == ""

    @pytest.mark.asyncio
    async def test_save_failures_keep_buffer(self, manual_timer):
        for error, message in [
            (ValidationError("Invalid token"), "Invalid token"),
            (NetworkError("Backend unreachable"), "Backend unreachable"),
        ]:
            editor = self._editor(FailingStore(self.projects, error), manual_timer)
            await editor.open()
            editor.on_content_changed("print('unsaved')")

            outcome = await editor.save()

            assert not outcome.ok
            assert outcome.error is error
            assert editor.notifier.items[-1].message == message
            assert editor.buffer.text == "print('unsaved')"

    @pytest.mark.asyncio
    async def test_double_save_is_gated(self, manual_timer):
        """Test shortcut plus button in the same tick sends one save."""
        store = GatedStore(self.projects)
        editor = self._editor(store, manual_timer)
        await editor.open()

        async def release():
            while not store.writes:
                await asyncio.sleep(0)
            assert editor.save_state == SaveState.SAVING
            store.gate.set()

        first, second, _ = await asyncio.gather(editor.save(), editor.save(), release())

        assert first.ok
        assert second.skipped
        assert store.writes == ["print('Hello World')"]
        assert editor.save_state == SaveState.IDLE

    @pytest.mark.asyncio
    async def test_run_button_and_shortcut_share_one_run(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        await editor.open()

        button, shortcut = await asyncio.gather(
            editor.run_project(),
            editor.shortcuts.dispatch(KeyEvent(key="b", ctrl=True)),
        )

        assert button.ok
        assert shortcut == "run"
        assert len(self.client.requests) == 1

    @pytest.mark.asyncio
    async def test_shortcuts_use_current_buffer(self, manual_timer):
        store = InMemoryProjectStore(projects=self.projects)
        editor = self._editor(store, manual_timer)
        await editor.open()

        editor.on_content_changed("print('edited after attach')")
        event = KeyEvent(key="s", ctrl=True)
        assert await editor.press_key(event) == "save"
        assert event.default_prevented
        assert self.projects["p1"].code == "print('edited after attach')"
        assert editor.notifier.items[-1].message == "Project saved successfully!"

        editor.key_bus.emit(KeyEvent(key="f", ctrl=True))
        assert editor.view.fullscreen is True

    @pytest.mark.asyncio
    async def test_key_press_reaches_only_its_own_view(self, manual_timer):
        first = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        second = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)

        assert await first.press_key(KeyEvent(key="f", ctrl=True)) == "toggle-fullscreen"

        assert first.view.fullscreen is True
        assert second.view.fullscreen is False

    @pytest.mark.asyncio
    async def test_close_detaches_and_cancels_reset(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        bus = editor.key_bus
        await editor.open()
        await editor.run_project()

        await editor.aclose()
        manual_timer.fire_pending()
        event = bus.emit(KeyEvent(key="f", ctrl=True))

        assert editor.closed
        assert bus.listener_count == 0
        assert not event.default_prevented
        assert editor.view.fullscreen is False
        assert editor.machine.phase == ExecutionPhase.COMPLETED

    @pytest.mark.asyncio
    async def test_close_releases_store_http_client(self, manual_timer):
        store = HttpProjectStore(base_url="http://backend.test/api", session=Session())
        editor = self._editor(store, manual_timer)

        await editor.aclose()
        await editor.aclose()

        assert store._client.is_closed

    @pytest.mark.asyncio
    async def test_close_cancels_run_started_by_shortcut(self, manual_timer, gated_client):
        editor = EditorController(
            "p1", InMemoryProjectStore(projects=self.projects), gated_client, timer=manual_timer
        )
        await editor.open()
        editor.key_bus.emit(KeyEvent(key="b", ctrl=True))
        await gated_client.wait_for_call()

        await editor.aclose()
        await editor.shortcuts.settle()

        assert editor.machine.phase == ExecutionPhase.FAILED
        assert editor.machine.error == "Execution cancelled"
        assert manual_timer.pending == []

    @pytest.mark.asyncio
    async def test_output_display_options(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        await editor.open()
        editor.on_content_changed("print('a')\nprint('b')")
        await editor.run_project()

        state = editor.state()
        assert state["output_config"] == {"wrap": True, "font_size": 14, "show_line_numbers": True}
        assert state["output_text"] == "1  a\n2  b\n3  "

        assert editor.toggle_output_wrap() is False
        assert editor.toggle_line_numbers() is False
        state = editor.state()
        assert state["output_config"]["wrap"] is False
        assert state["output_text"] == "a\nb\n"

        assert editor.increase_font() == 18
        assert editor.decrease_font() == 16
        assert editor.state()["view"]["font_size"] == 16

    @pytest.mark.asyncio
    async def test_dismiss_notifications(self, manual_timer):
        editor = self._editor(InMemoryProjectStore(projects=self.projects), manual_timer)
        await editor.open()
        await editor.save()

        dismissed = editor.dismiss_notifications()

        assert [n.message for n in dismissed] == ["Project saved successfully!"]
        assert editor.state()["notifications"] == []

    @pytest.mark.asyncio
    async def test_save_and_run_overlap(self, manual_timer):
        store = GatedStore(self.projects)
        editor = self._editor(store, manual_timer)
        await editor.open()

        save_task = asyncio.create_task(editor.save())
        while not store.writes:
            await asyncio.sleep(0)

        ran = await editor.run_project()
        assert ran.ok
        assert editor.save_state == SaveState.SAVING

        store.gate.set()
        assert (await save_task).ok
