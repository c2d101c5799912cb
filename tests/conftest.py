"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import pytest

from codeql_action.actions.publish import EnvironmentPublisher
from codeql_action.core.config.settings import (
    CodeQLSettings,
    LoggingSettings,
    Settings,
    WorkspaceSettings,
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def write_spec(temp_dir: Path) -> Callable[..., Path]:
    """Return a helper writing a tracer spec file into the temp directory.

    The helper takes a file name and the block lines, plus an optional log
    path, and returns the path of the written spec.
    """

    def _write(name: str, blocks: list[str], log_path: str | None = None) -> Path:
        path = temp_dir / name
        log_path = log_path or str(temp_dir / f"{name}.log")
        path.write_text("\n".join([log_path, str(len(blocks)), *blocks]) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def publisher(temp_dir: Path) -> EnvironmentPublisher:
    """Create a publisher writing to a private environment and runner file.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        EnvironmentPublisher that never touches os.environ.
    """
    return EnvironmentPublisher(environ={}, env_file=temp_dir / "github_env")


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Create settings pointing at the temp directory.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Settings instance.
    """
    return Settings(
        workspace=WorkspaceSettings(workspace=temp_dir / "runner", temp=temp_dir / "scratch"),
        codeql=CodeQLSettings(cmd="codeql", tools=temp_dir / "tools"),
        logging=LoggingSettings(use_rich=False),
    )


@pytest.fixture(autouse=True)
def outside_github_actions(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test as if outside a workflow job."""
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
