"""Load declaration manifests from a URL, local file, or stdin.

A manifest describes declarations as data instead of PHP source, which is
useful for projects whose classes ruletype cannot read directly, or for
overriding what the scanner found. JSON and YAML are both accepted, with
automatic format detection::

    requests:
      StoreUserRequest:
        rules:
          name: required|string|max:255
          role: [required, {enum_value: App\\Enums\\UserRole}]
        properties:
          role: \\App\\Enums\\UserRole
    resources:
      UserResource:
        file: app/Http/Resources/UserResource.php   # or an inline "source"
        mixin: App\\Models\\User
    collections:
      UserCollection: {collects: App\\Http\\Resources\\UserResource}
    data:
      UserData:
        properties: {id: int, name: string}
    enums:
      UserRole:
        cases: {Admin: 0, User: 1}

The public entry point is :func:`load_manifest`; it returns a
:class:`~ruletype.models.Project` that can be merged over a scanned one.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import ValidationError

from ruletype.exceptions import SourceParseError
from ruletype.models import Project
from ruletype.parser.php import extract_method_source
from ruletype.rules.objects import coerce_rule_spec

logger = logging.getLogger(__name__)

SECTIONS = ("requests", "resources", "collections", "data", "enums")


def load_manifest(source: str) -> Project:
    """Load a declaration manifest from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The declarations as a :class:`~ruletype.models.Project`.

    Raises:
        SourceParseError: If the source cannot be loaded, parsed, or
            validated.
    """
    base_dir: Optional[Path] = None
    if source == "-":
        raw = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        raw = _load_from_url(source)
    else:
        raw = _load_from_file(source)
        base_dir = Path(source).resolve().parent

    return build_project(raw, base_dir=base_dir)


def build_project(raw: dict[str, Any], base_dir: Optional[Path] = None) -> Project:
    """Validate a parsed manifest into a :class:`~ruletype.models.Project`.

    Section keys are declaration names; a missing ``name`` field is filled
    from the key. Rule specs are converted to rule objects, and a resource
    ``file`` is read (relative to *base_dir*) to provide its ``source``.

    Raises:
        SourceParseError: On unknown sections or validation failures.
    """
    unknown = sorted(set(raw) - set(SECTIONS))
    if unknown:
        raise SourceParseError(
            f"Unknown manifest section(s): {', '.join(unknown)}. "
            f"Expected: {', '.join(SECTIONS)}"
        )

    data: dict[str, Any] = {}
    for section in SECTIONS:
        entries = raw.get(section) or {}
        if not isinstance(entries, dict):
            raise SourceParseError(f"Manifest section '{section}' must be a mapping")

        normalized: dict[str, Any] = {}
        for name, entry in entries.items():
            entry = dict(entry or {})
            entry.setdefault("name", name)
            if section == "requests":
                entry["rules"] = {
                    field: coerce_rule_spec(spec)
                    for field, spec in (entry.get("rules") or {}).items()
                }
            elif section == "resources" and "file" in entry:
                file = entry.pop("file")
                entry["source"] = _read_resource_source(file, base_dir)
                entry.setdefault("source_file", file)
            normalized[name] = entry
        data[section] = normalized

    try:
        return Project.model_validate(data)
    except ValidationError as exc:
        raise SourceParseError(f"Invalid manifest: {exc}") from exc


def _read_resource_source(file: str, base_dir: Optional[Path]) -> str:
    path = Path(file)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceParseError(f"Failed to read resource source {path}: {exc}") from exc

    # A whole class file: keep only its toArray method.
    method = extract_method_source(text, "toArray")
    if method is None:
        logger.debug("No toArray method in %s, using the whole file", path)
        return text
    return method


def _load_from_stdin() -> dict[str, Any]:
    """Read a manifest from stdin.

    Returns:
        The parsed manifest dictionary.

    Raises:
        SourceParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SourceParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a manifest from URL. Supports JSON and YAML responses.

    Raises:
        SourceParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceParseError(
            f"HTTP {exc.response.status_code} fetching manifest from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceParseError(f"Failed to fetch manifest from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a manifest from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SourceParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceParseError(f"Manifest file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceParseError(f"Failed to read manifest file {path}: {exc}") from exc

    if not content.strip():
        raise SourceParseError(f"Manifest file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SourceParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SourceParseError(
                    "Manifest must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SourceParseError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SourceParseError(
                "Manifest must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse manifest as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SourceParseError(msg)
