"""Integration tests for the init command flow.

Tests the lifecycle of ``ruletype.json``: creation with defaults and
flags, refusal to overwrite without ``--force``, and pick-up of the
written file by a following ``generate`` run.
"""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from ruletype.app import app
from ruletype.config import load_project_config, resolve_config


class TestInitFlow:
    def test_init_writes_defaults(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "init"])

        assert result.exit_code == 0, result.output
        assert "Wrote ruletype.json." in result.output
        assert "Source directory 'app' does not exist yet." in result.output
        assert "ruletype generate" in result.output

        data = json.loads((isolated_config / "ruletype.json").read_text(encoding="utf-8"))
        assert data["source_dir"] == "app"
        assert data["output"] == "resources/types/generated.d.ts"
        assert data["native_enums"] is False

    def test_init_with_flags(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "src").mkdir()
        result = cli_runner.invoke(
            app,
            [
                "--no-color",
                "init",
                "--source-dir", "src",
                "--output", "frontend/api.d.ts",
                "--native-enums",
                "--null-as-optional",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "does not exist yet" not in result.output
        project = load_project_config()
        assert project is not None
        assert project["source_dir"] == "src"
        assert project["output"] == "frontend/api.d.ts"
        assert project["native_enums"] is True
        assert project["null_as_optional"] is True

    def test_refuses_to_overwrite(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "ruletype.json").write_text('{"source_dir": "keep"}', encoding="utf-8")

        result = cli_runner.invoke(app, ["--no-color", "init", "--source-dir", "other"])

        assert result.exit_code == 2
        assert "already exists" in result.output
        assert load_project_config() == {"source_dir": "keep"}

    def test_force_overwrites(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "ruletype.json").write_text('{"source_dir": "keep"}', encoding="utf-8")

        result = cli_runner.invoke(app, ["--no-color", "init", "--force", "--source-dir", "other"])

        assert result.exit_code == 0, result.output
        assert load_project_config()["source_dir"] == "other"

    def test_quiet_init_prints_nothing(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "--quiet", "init"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_written_config_is_resolved(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["--no-color", "init", "--source-dir", "backend/app"])
        _, generator = resolve_config()
        assert generator.source_dir == "backend/app"


class TestVersion:
    def test_version_flag(self, cli_runner: CliRunner) -> None:
        from ruletype import __version__

        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"ruletype {__version__}"
