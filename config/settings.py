"""Configuration settings for Codepad."""

import os
from pathlib import Path


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src"

# Server configuration
SERVER_HOST = os.getenv("CODEPAD_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("CODEPAD_PORT", "8000"))

# Backend project API
API_BASE_URL = os.getenv("CODEPAD_API_BASE_URL", "http://localhost:3000")

# Execution service configuration
EXECUTION_SERVICE_URL = os.getenv(
    "EXECUTION_SERVICE_URL", "https://emkc.org/api/v2/piston/execute"
)
# Unset means no timeout: a hung execution call keeps the run in Running.
EXECUTION_TIMEOUT_SECONDS = _optional_float("EXECUTION_TIMEOUT_SECONDS")

# Run lifecycle timing
COMPILE_DELAY_SECONDS = float(os.getenv("COMPILE_DELAY_SECONDS", "0.5"))
RESULT_DISPLAY_SECONDS = float(os.getenv("RESULT_DISPLAY_SECONDS", "2.0"))

# Layout
COMPACT_BREAKPOINT_PX = int(os.getenv("COMPACT_BREAKPOINT_PX", "768"))

# Run-selection defaults
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "python")
DEFAULT_VERSION = os.getenv("DEFAULT_VERSION", "3.9.0")
DEFAULT_SNIPPET = os.getenv("DEFAULT_SNIPPET", "print('Hello World')")

# Session storage
SESSION_FILE = Path(
    os.getenv("CODEPAD_SESSION_FILE", str(PROJECT_ROOT / ".codepad" / "session.json"))
)

# Use in-memory project store and mock execution client
USE_MOCK_SERVICES = os.getenv("USE_MOCK_SERVICES", "false").lower() in ("true", "1", "yes")

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
