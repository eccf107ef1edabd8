"""Shared test fixtures for ruletype.

Provides reusable fixtures for loading the PHP fixture tree, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest

from ruletype.models import (
    DataDeclaration,
    EnumDeclaration,
    Project,
    RequestDeclaration,
    ResourceDeclaration,
)
from ruletype.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
APP_FIXTURE_DIR = FIXTURES_DIR / "app"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and CLI log handler after every test.

    The OutputManager and the handler installed by ``configure_logging``
    cache references to sys.stdout/sys.stderr at creation time. When
    Typer's CliRunner redirects those streams during a test and the test
    finishes, the cached references become stale ("I/O operation on closed
    file"). Resetting forces fresh ones to be created on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("ruletype")
    for handler in list(logger.handlers):
        if getattr(handler, "_ruletype_cli", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Source fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app_source(tmp_path: Path) -> Path:
    """A private copy of the PHP fixture tree, safe to modify."""
    target = tmp_path / "app"
    shutil.copytree(APP_FIXTURE_DIR, target)
    return target


@pytest.fixture
def scanned_project() -> Project:
    """The fixture tree scanned with default patterns."""
    from ruletype.parser.scanner import SourceScanner

    return SourceScanner().scan(str(APP_FIXTURE_DIR))


@pytest.fixture
def small_project() -> Project:
    """A hand-built project with one declaration of most kinds."""
    return Project(
        requests={
            "LoginRequest": RequestDeclaration(
                name="LoginRequest",
                rules={
                    "email": "required|email",
                    "password": "required|string",
                    "remember": "sometimes|boolean",
                },
            ),
        },
        resources={
            "SessionResource": ResourceDeclaration(
                name="SessionResource",
                source=(
                    "public function toArray($request)\n"
                    "{\n"
                    "    return [\n"
                    "        'token' => $this->token,\n"
                    "        'expires_at' => $this->expires_at->toIso8601String(),\n"
                    "    ];\n"
                    "}\n"
                ),
            ),
        },
        data={
            "SessionData": DataDeclaration(
                name="SessionData",
                properties={"token": "string", "expires_at": "\\Carbon\\Carbon"},
            ),
        },
        enums={
            "Theme": EnumDeclaration(name="Theme", cases={"Light": "light", "Dark": "dark"}),
        },
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all RULETYPE_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: True)

    for var in [
        "RULETYPE_SOURCE_DIR",
        "RULETYPE_OUTPUT",
        "RULETYPE_MANIFEST",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
