"""Data models for the Codepad system."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ExecutionPhase(str, Enum):
    """Lifecycle marker of a run."""

    IDLE = "idle"
    COMPILING = "compiling"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SaveState(str, Enum):
    """Lifecycle marker of a save."""

    IDLE = "idle"
    SAVING = "saving"


class OutputKind(str, Enum):
    """Display class of an output line."""

    OUTPUT = "output"
    ERROR = "error"


class LayoutMode(str, Enum):
    """Panel arrangement derived from the viewport width."""

    SPLIT = "split"
    COMPACT = "compact"


class Panel(str, Enum):
    """Panels of the editor view."""

    EDITOR = "editor"
    OUTPUT = "output"


class Theme(str, Enum):
    """Colour theme preference."""

    DARK = "dark"
    LIGHT = "light"


@dataclass(frozen=True)
class Project:
    """A persisted code artifact."""

    id: str
    name: str
    code: str
    language: str
    version: str


@dataclass(frozen=True)
class ExecutionRequest:
    """A unit of work sent to the execution service."""

    language: str
    version: str
    content: str
    filename: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Build the execution service request body."""
        file_entry: dict[str, str] = {"content": self.content}
        if self.filename is not None:
            file_entry["filename"] = self.filename
        return {
            "language": self.language,
            "version": self.version,
            "files": [file_entry],
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Normalized response of the execution service."""

    exit_code: int
    raw_output: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class OutputLine:
    """One renderable line of output."""

    line_number: int
    content: str
    kind: OutputKind


@dataclass(frozen=True)
class ExecutionSnapshot:
    """Immutable view of the execution state published to the UI."""

    phase: ExecutionPhase
    progress: int
    status: str
    output_lines: tuple[OutputLine, ...] | None = None
    result: ExecutionResult | None = None
    error: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.phase in (ExecutionPhase.COMPILING, ExecutionPhase.RUNNING)


@dataclass(frozen=True)
class OutputConfig:
    """Console display options."""

    wrap: bool = True
    font_size: int = 14
    show_line_numbers: bool = True


@dataclass
class ActionOutcome:
    """Result of one user-triggered action."""

    ok: bool
    value: Any = None
    error: Exception | None = None
    skipped: bool = False

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None


@dataclass
class Notification:
    """A transient user-facing message."""

    level: str
    message: str
    auto_close: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)


# Wire models for the backend project API


class ProjectPayload(BaseModel):
    """Project record as returned by the backend."""

    name: str = ""
    code: str = ""
    projLanguage: str
    version: str


class LoadProjectResponse(BaseModel):
    """Response of the getProject endpoint."""

    success: bool
    project: ProjectPayload | None = None
    msg: str | None = None


class SaveProjectResponse(BaseModel):
    """Response of the saveProject endpoint."""

    success: bool
    msg: str | None = None


# Wire models for the execution service


class RunOutputPayload(BaseModel):
    """The run section of an execution response."""

    code: int
    output: str


class ExecuteResponse(BaseModel):
    """Response of the execution service."""

    run: RunOutputPayload


# Request bodies of the editor service


class BufferUpdate(BaseModel):
    """New full text reported by the editing widget."""

    text: str = ""


class SelectionUpdate(BaseModel):
    """Selection reported by the editing widget."""

    text: str | None = None


class KeyPress(BaseModel):
    """A keyboard event forwarded from the page."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False


class Resize(BaseModel):
    """Viewport size change."""

    width: int = Field(..., ge=0)


class LoginRequest(BaseModel):
    """Session token handed over after authentication."""

    token: str
    full_name: str | None = None
