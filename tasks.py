"""
Codepad Development Workflow Tasks.

Task automation for the Codepad editor service: installation, tests,
linting, and running the server locally.
"""

from typing import Any

from invoke import task


@task
def install(c: Any) -> None:
    """Install the Codepad package with its runtime dependencies."""
    c.run("uv pip install -e .")


@task
def install_dev(c: Any, name="install-dev") -> None:
    """Install Codepad with test and development tooling."""
    c.run("uv pip install -e '.[dev]'")


@task
def test(c: Any) -> None:
    """Run the whole test suite."""
    c.run("pytest")


@task
def test_unit(c: Any, name="test-unit") -> None:
    """
    Run unit tests only.

    Skips the integration suite that drives the editor controller and the
    HTTP service end to end.
    """
    c.run("pytest tests/unit -m 'not integration'")


@task
def test_integration(c: Any, name="test-integration") -> None:
    """Run the editor workflow and HTTP service tests."""
    c.run("pytest tests/integration -m integration")


@task
def test_coverage(c: Any, name="test-coverage") -> None:
    """Run all tests with HTML and terminal coverage reports."""
    c.run("pytest --cov=src/codepad --cov-report=html --cov-report=term-missing")


@task
def lint(c: Any) -> None:
    """
    Run static checks.

    Ruff for lint rules and MyPy for type checking of the package sources.
    """
    c.run("ruff check src/ tests/")
    c.run("mypy src/")


@task
def format_code(c: Any) -> None:
    """Format sources with Black, isort and Ruff fixes."""
    c.run("black src/ tests/")
    c.run("isort src/ tests/")
    c.run("ruff check --fix src/ tests/")


@task
def clean(c: Any) -> None:
    """Remove caches, build artifacts and the local session file."""
    c.run("find . -type f -name '*.pyc' -delete")
    c.run("find . -type d -name '__pycache__' -delete")
    c.run("find . -type d -name '*.egg-info' -exec rm -rf {} + || true")
    c.run("rm -rf build/ dist/ htmlcov/ .coverage")
    c.run("rm -rf .pytest_cache/ .mypy_cache/")
    c.run("rm -rf .codepad/")


@task
def run(c: Any) -> None:
    """Start the Codepad server."""
    c.run("python main.py")


@task
def dev(c: Any) -> None:
    """
    Start the server with auto-reload against mock services.

    Uses the in-memory project store and the mock execution client so no
    backend or sandbox is needed.
    """
    c.run(
        "USE_MOCK_SERVICES=true uvicorn src.codepad.main:app --reload --host 0.0.0.0 --port 8000"
    )


@task
def demo(c: Any, url: str = "http://localhost:8000", project: str = "demo") -> None:
    """
    Drive a running server through open, edit, save and run.

    Args:
        url: Base URL of the Codepad server
        project: Project id to open
    """
    c.run(f"python scripts/demo_session.py --url {url} --project {project}")


@task
def setup(c: Any) -> None:
    """Create a virtual environment and install development dependencies."""
    print("Initializing Codepad development environment...")
    c.run("uv venv")
    c.run("source .venv/bin/activate && uv pip install -e '.[dev]'")
    print("Setup completed! Execute 'invoke dev' to start the server.")
