"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for ruletype:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ruletype/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~ruletype.models.GlobalConfig`
  JSON file storing user-wide defaults (output format, generator settings).
* **Project config** -- ``./ruletype.json`` holding the
  :class:`~ruletype.models.GeneratorConfig` fields for one repository,
  written by ``ruletype init``.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ruletype.exceptions import ConfigError
from ruletype.models import GeneratorConfig, GlobalConfig

_APP_NAME = "ruletype"
_CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = "ruletype.json"

# Environment variable -> GeneratorConfig field.
ENV_OVERRIDES = {
    "RULETYPE_SOURCE_DIR": "source_dir",
    "RULETYPE_OUTPUT": "output",
    "RULETYPE_MANIFEST": "manifest",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/ruletype/`` (default ``~/.config/ruletype/``).
    On macOS/Windows: ``~/.ruletype/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ruletype/`` (default ``~/.local/share/ruletype/``).
    On macOS/Windows: ``~/.ruletype/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="\n",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~ruletype.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def project_config_path() -> Path:
    return Path.cwd() / PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./ruletype.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. Its keys are :class:`~ruletype.models.GeneratorConfig`
    field names.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but does not contain a JSON object.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def save_project_config(config: GeneratorConfig, path: Optional[Path] = None) -> Path:
    """Write *config* as ``ruletype.json`` (in the working directory by default).

    Returns:
        The path written.
    """
    target = path or project_config_path()
    data = config.model_dump(mode="json")
    atomic_write(target, json.dumps(data, indent=2) + "\n")
    return target


# --- Precedence resolution ---


def resolve_config(
    cli_source_dir: Optional[str] = None,
    cli_output: Optional[str] = None,
    cli_manifest: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, GeneratorConfig]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_source_dir``, ``cli_output``, ``cli_manifest``,
           ``cli_format``)
        2. Environment variables (``RULETYPE_SOURCE_DIR``,
           ``RULETYPE_OUTPUT``, ``RULETYPE_MANIFEST``)
        3. Project config (``./ruletype.json``)
        4. User config (``~/.config/ruletype/config.json``)
        5. Defaults

    Returns:
        A tuple of ``(global_config, generator_config)``.

    Raises:
        ConfigError: If any layer holds invalid values.
    """
    # 5 + 4. Defaults and user config
    global_cfg = load_global_config()
    merged = global_cfg.generator.model_dump()

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        merged.update(project)

    # 2. Environment variables
    for env_var, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[field_name] = value

    # 1. CLI flags
    cli_values = {
        "source_dir": cli_source_dir,
        "output": cli_output,
        "manifest": cli_manifest,
    }
    merged.update({key: value for key, value in cli_values.items() if value is not None})

    try:
        generator_cfg = GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generator configuration: {exc}") from exc

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg, generator_cfg
