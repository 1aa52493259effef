"""Execution service client with a Piston-compatible HTTP implementation."""

import json
import logging
import re
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import NetworkError
from .models import ExecuteResponse, ExecutionRequest, ExecutionResult

logger = logging.getLogger(__name__)

PISTON_EXECUTE_URL = "https://emkc.org/api/v2/piston/execute"


class ExecutionClient(ABC):
    """Abstract base class for execution service clients."""

    @abstractmethod
    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Run code on the execution service.

        Args:
            request: Code and target language/version

        Returns:
            Normalized execution result; a nonzero exit code is a normal result

        Raises:
            NetworkError: On transport failure or a malformed response
        """
        pass

    async def aclose(self) -> None:
        """Release transport resources."""
        return None


class MockExecutionClient(ExecutionClient):
    """Mock execution client for testing and demo purposes."""

    _PRINT_PATTERN = re.compile(r"""print\(\s*(['"])(.*?)\1\s*\)""")

    def __init__(self) -> None:
        """Initialize mock client with an empty call log."""
        self.requests: list[ExecutionRequest] = []

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Answer with canned output derived from the submitted code."""
        self.requests.append(request)

        if "raise" in request.content or "error" in request.content.lower():
            return ExecutionResult(
                exit_code=1,
                raw_output=(
                    "Traceback (most recent call last):\n"
                    f'  File "{request.filename or "main"}", line 1, in <module>\n'
                    "RuntimeError: mock failure\n"
                ),
            )

        printed = [match.group(2) for match in self._PRINT_PATTERN.finditer(request.content)]
        output = "".join(f"{line}\n" for line in printed)
        return ExecutionResult(exit_code=0, raw_output=output)


class PistonExecutionClient(ExecutionClient):
    """HTTP client for a Piston-style ``/execute`` endpoint.

    No timeout is applied unless one is configured explicitly: a hung
    service call keeps the run in the Running phase until it resolves.
    """

    def __init__(
        self,
        url: str = PISTON_EXECUTE_URL,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the Piston client.

        Args:
            url: Full URL of the execute endpoint
            timeout: Optional request timeout in seconds (None disables it)
            http_client: Pre-built client, mainly for tests
        """
        self.url = url
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        if timeout is not None:
            logger.warning(
                f"Execution timeout set to {timeout}s; runs exceeding it will fail"
            )

    async def _post(self, payload: dict) -> dict:
        """Make HTTP request to the execution service."""
        response = await self._client.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        return response.json()

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Post the request and normalize the service response."""
        logger.info(f"Executing {request.language} {request.version} code")

        try:
            body = await self._post(request.to_payload())
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"Execution service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Execution service unreachable: {e}") from e
        except json.JSONDecodeError as e:
            raise NetworkError("Execution service returned invalid JSON") from e

        try:
            parsed = ExecuteResponse.model_validate(body)
        except PydanticValidationError as e:
            raise NetworkError("Malformed execution response: missing run result") from e

        result = ExecutionResult(exit_code=parsed.run.code, raw_output=parsed.run.output)
        logger.info(f"Execution finished with exit code {result.exit_code}")
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_execution_client(
    use_mock: bool = False,
    url: str = PISTON_EXECUTE_URL,
    timeout: float | None = None,
) -> ExecutionClient:
    """Factory function to create the appropriate execution client.

    Args:
        use_mock: If True, use the mock client
        url: Execute endpoint for the HTTP client
        timeout: Optional request timeout in seconds

    Returns:
        Execution client instance
    """
    if use_mock:
        return MockExecutionClient()
    return PistonExecutionClient(url=url, timeout=timeout)
