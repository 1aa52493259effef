"""Project store: load projects and persist edited code."""

import json
import logging
from abc import ABC, abstractmethod
from collections import Counter

import httpx
from pydantic import ValidationError as PydanticValidationError

from .buffer import EditableBuffer
from .errors import NetworkError, NotFoundError, ValidationError
from .models import LoadProjectResponse, Project, SaveProjectResponse, SaveState
from .session import Session

logger = logging.getLogger(__name__)


class ProjectStore(ABC):
    """Base class for project stores.

    Tracks in-flight saves per project. A save issued while another is still
    in flight goes out immediately; callers gate on ``save_state`` to avoid
    redundant requests.
    """

    def __init__(self, buffer: EditableBuffer | None = None):
        """Initialize the store.

        Args:
            buffer: Buffer populated with the code of each loaded project
        """
        self.buffer = buffer
        self._in_flight: Counter[str] = Counter()

    @abstractmethod
    async def _fetch(self, project_id: str) -> Project:
        pass

    @abstractmethod
    async def _write(self, project_id: str, code: str) -> None:
        pass

    async def load(self, project_id: str) -> Project:
        """Load a project and mirror its code into the buffer.

        Raises:
            NotFoundError: If the backend rejects the load
            NetworkError: On transport failure
        """
        project = await self._fetch(project_id)
        if self.buffer is not None:
            self.buffer.load(project.code)
        logger.info(f"Loaded project {project_id} ({project.language} {project.version})")
        return project

    async def save(self, project_id: str, text: str) -> None:
        """Persist code for a project.

        Raises:
            ValidationError: If the backend rejects the save
            NetworkError: On transport failure
        """
        self._in_flight[project_id] += 1
        try:
            await self._write(project_id, text.strip())
            logger.info(f"Saved project {project_id}")
        finally:
            self._in_flight[project_id] -= 1
            if self._in_flight[project_id] <= 0:
                del self._in_flight[project_id]

    def save_state(self, project_id: str) -> SaveState:
        return SaveState.SAVING if self._in_flight[project_id] > 0 else SaveState.IDLE

    async def aclose(self) -> None:
        return None


class InMemoryProjectStore(ProjectStore):
    """Project store kept in a dictionary, for demos and tests."""

    def __init__(
        self,
        projects: dict[str, Project] | None = None,
        buffer: EditableBuffer | None = None,
    ):
        super().__init__(buffer)
        self.projects = projects if projects is not None else {}

    async def _fetch(self, project_id: str) -> Project:
        try:
            return self.projects[project_id]
        except KeyError:
            raise NotFoundError("Project not found !") from None

    async def _write(self, project_id: str, code: str) -> None:
        project = self.projects.get(project_id)
        if project is None:
            raise ValidationError("Project not found !")
        self.projects[project_id] = Project(
            id=project.id,
            name=project.name,
            code=code,
            language=project.language,
            version=project.version,
        )


class HttpProjectStore(ProjectStore):
    """Client for the backend project API."""

    def __init__(
        self,
        base_url: str,
        session: Session,
        buffer: EditableBuffer | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the HTTP project store.

        Args:
            base_url: Backend API base URL
            session: Session supplying the auth token
            buffer: Buffer populated on load
            http_client: Pre-built client, mainly for tests
        """
        super().__init__(buffer)
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    async def _post(self, endpoint: str, payload: dict) -> dict:
        try:
            response = await self._client.post(
                f"{self.base_url}/{endpoint}",
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            return response.json()
        except httpx.HTTPError as e:
            raise NetworkError(f"Backend unreachable: {e}") from e
        except json.JSONDecodeError as e:
            raise NetworkError(f"Backend returned invalid JSON from {endpoint}") from e

    async def _fetch(self, project_id: str) -> Project:
        body = await self._post(
            "getProject",
            {"token": self.session.token, "projectId": project_id},
        )
        try:
            parsed = LoadProjectResponse.model_validate(body)
        except PydanticValidationError as e:
            raise NetworkError("Malformed getProject response") from e

        if not parsed.success:
            raise NotFoundError(parsed.msg or "Failed to load project.")
        if parsed.project is None:
            raise NetworkError("Malformed getProject response: missing project")

        return Project(
            id=project_id,
            name=parsed.project.name,
            code=parsed.project.code,
            language=parsed.project.projLanguage,
            version=parsed.project.version,
        )

    async def _write(self, project_id: str, code: str) -> None:
        body = await self._post(
            "saveProject",
            {"token": self.session.token, "projectId": project_id, "code": code},
        )
        try:
            parsed = SaveProjectResponse.model_validate(body)
        except PydanticValidationError as e:
            raise NetworkError("Malformed saveProject response") from e

        if not parsed.success:
            raise ValidationError(parsed.msg or "Failed to save code")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_project_store(
    session: Session,
    buffer: EditableBuffer | None = None,
    use_memory: bool = False,
    base_url: str = "http://localhost:3000",
    projects: dict[str, Project] | None = None,
) -> ProjectStore:
    """Factory function to create the appropriate project store."""
    if use_memory:
        return InMemoryProjectStore(projects=projects, buffer=buffer)
    return HttpProjectStore(base_url=base_url, session=session, buffer=buffer)
