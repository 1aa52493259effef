"""Codepad core functionality."""

from .editor import EditorController
from .errors import CodepadError, NetworkError, NotFoundError, ServiceError, ValidationError
from .execution_client import ExecutionClient, MockExecutionClient, PistonExecutionClient
from .formatter import format_output
from .models import ExecutionPhase, ExecutionRequest, ExecutionResult, OutputLine, Project
from .project_store import HttpProjectStore, InMemoryProjectStore, ProjectStore
from .state_machine import ExecutionStateMachine

__all__ = [
    "EditorController",
    "CodepadError",
    "NetworkError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
    "ExecutionClient",
    "MockExecutionClient",
    "PistonExecutionClient",
    "format_output",
    "ExecutionPhase",
    "ExecutionRequest",
    "ExecutionResult",
    "OutputLine",
    "Project",
    "HttpProjectStore",
    "InMemoryProjectStore",
    "ProjectStore",
    "ExecutionStateMachine",
]
