"""Init command -- write a project-local ``ruletype.json``.

Implements the ``ruletype init`` top-level command. It records where the
PHP sources live and where the declaration file goes, so later runs of
``ruletype generate`` need no flags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ruletype.output import error, info, success, suggest


def init_command(
    source_dir: str = typer.Option(
        "app", "--source-dir", "-s", help="Root of the PHP sources to scan."
    ),
    output: str = typer.Option(
        "resources/types/generated.d.ts", "--output", "-o", help="Declaration file to write."
    ),
    manifest: Optional[str] = typer.Option(
        None, "--manifest", "-m", help="JSON/YAML manifest merged over scanned classes."
    ),
    native_enums: bool = typer.Option(
        False, "--native-enums", help="Emit 'export enum' instead of literal unions."
    ),
    null_as_optional: bool = typer.Option(
        False, "--null-as-optional", help="Render nullable companion types as optional fields."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing ruletype.json."
    ),
) -> None:
    """Create ``ruletype.json`` in the current directory.

    Example::

        ruletype init
        ruletype init --source-dir src/app --output frontend/types/api.d.ts
    """
    from ruletype.config import project_config_path, save_project_config
    from ruletype.models import GeneratorConfig

    path = project_config_path()
    if path.exists() and not force:
        error(f"{path.name} already exists. Use --force to overwrite it.")
        raise typer.Exit(code=2)

    if not Path(source_dir).is_dir():
        info(f"Source directory '{source_dir}' does not exist yet.")

    config = GeneratorConfig(
        source_dir=source_dir,
        output=output,
        manifest=manifest,
        native_enums=native_enums,
        null_as_optional=null_as_optional,
    )
    save_project_config(config, path)

    success(f"Wrote {path.name}.")
    suggest("Generate declarations: ruletype generate")
