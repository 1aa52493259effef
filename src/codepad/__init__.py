"""Codepad core package."""

from .core.editor import EditorController
from .core.execution_client import ExecutionClient, MockExecutionClient
from .core.models import ExecutionPhase, ExecutionRequest, ExecutionResult, Project
from .core.state_machine import ExecutionStateMachine

__all__ = [
    "ExecutionPhase",
    "ExecutionRequest",
    "ExecutionResult",
    "Project",
    "ExecutionClient",
    "MockExecutionClient",
    "ExecutionStateMachine",
    "EditorController",
]
