"""Tests for ruletype.config -- XDG paths, atomic writes, project config, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from ruletype.config import (
    atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
    save_project_config,
)
from ruletype.exceptions import ConfigError
from ruletype.models import GeneratorConfig, GlobalConfig, OutputConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "ruletype"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        result = get_config_dir()
        assert result == custom / "ruletype"
        assert result.is_dir()

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "ruletype"
        assert result.is_dir()


class TestXDGPathsFallback:
    """Fallback paths on non-XDG platforms (macOS, Windows)."""

    def test_config_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".ruletype"
        assert result.is_dir()

    def test_data_dir_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("ruletype.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".ruletype" / "logs"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "c" / "test.txt"
        atomic_write(target, "deep write")
        assert target.read_text(encoding="utf-8") == "deep write"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("ruletype.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []

    def test_newlines_not_translated(self, tmp_path: Path) -> None:
        target = tmp_path / "generated.d.ts"
        atomic_write(target, "a\nb\n")
        assert target.read_bytes() == b"a\nb\n"


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        cfg = load_global_config()
        assert cfg == GlobalConfig()
        assert cfg.output.format == "auto"
        assert cfg.generator.output == "resources/types/generated.d.ts"

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        original = GlobalConfig(
            output=OutputConfig(format="json"),
            generator=GeneratorConfig(native_enums=True, data_suffix="Dto"),
        )
        save_global_config(original)
        assert load_global_config() == original

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        path = isolated_config / "config" / "ruletype" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{invalid json!!!", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "config" / "ruletype" / "config.json", {"output": "not-a-dict"})
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "ruletype.json", {"source_dir": "app"})
        assert load_project_config() == {"source_dir": "app"}

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (isolated_config / "ruletype.json").write_text("broken{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "ruletype.json", ["app"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()

    def test_save_project_config(self, isolated_config: Path) -> None:
        path = save_project_config(GeneratorConfig(source_dir="app"))
        assert path == isolated_config / "ruletype.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["source_dir"] == "app"
        assert data["include"] == ["**/*.php"]


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """Test the full precedence chain: CLI > env > project > global > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        cfg, generator = resolve_config()
        assert isinstance(cfg, GlobalConfig)
        assert generator == GeneratorConfig()

    def test_global_generator_settings(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(generator=GeneratorConfig(source_dir="global-app")))
        _, generator = resolve_config()
        assert generator.source_dir == "global-app"

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(
            GlobalConfig(generator=GeneratorConfig(source_dir="global-app", native_enums=True))
        )
        _write_json(isolated_config / "ruletype.json", {"source_dir": "project-app"})

        _, generator = resolve_config()
        assert generator.source_dir == "project-app"
        assert generator.native_enums is True

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "ruletype.json", {"source_dir": "project-app"})
        monkeypatch.setenv("RULETYPE_SOURCE_DIR", "env-app")
        monkeypatch.setenv("RULETYPE_OUTPUT", "env.d.ts")

        _, generator = resolve_config()
        assert generator.source_dir == "env-app"
        assert generator.output == "env.d.ts"

    def test_empty_env_value_ignored(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "ruletype.json", {"source_dir": "project-app"})
        monkeypatch.setenv("RULETYPE_SOURCE_DIR", "")
        _, generator = resolve_config()
        assert generator.source_dir == "project-app"

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RULETYPE_MANIFEST", "env.yaml")
        _, generator = resolve_config(cli_manifest="cli.yaml", cli_source_dir="cli-app")
        assert generator.manifest == "cli.yaml"
        assert generator.source_dir == "cli-app"

    def test_cli_format_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(output=OutputConfig(format="plain")))
        cfg, _ = resolve_config(cli_format="json")
        assert cfg.output.format == "json"

    def test_invalid_value_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "ruletype.json", {"null_as_optional": "sometimes"})
        with pytest.raises(ConfigError, match="Invalid generator configuration"):
            resolve_config()
