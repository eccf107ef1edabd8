"""Generate command -- scan sources, infer types, write the declaration file.

Implements ``ruletype generate``. By default the rendered declarations are
written to the configured output path (only when they changed). ``--stdout``
prints them instead, and ``--check`` compares them with the file on disk
and exits with :data:`~ruletype.exit_codes.EXIT_OUTPUT_DRIFT` when it is
stale, which makes the command usable as a CI gate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ruletype.exceptions import OutputDriftError, RuletypeError
from ruletype.generator.pipeline import GenerationResult
from ruletype.models import GeneratorConfig
from ruletype.output import (
    OutputFormat,
    debug,
    error,
    get_output,
    info,
    print_declarations,
    success,
    suggest,
    warning,
)


def run_generation(
    source_dir: Optional[str] = None,
    output: Optional[str] = None,
    manifest: Optional[str] = None,
) -> tuple[GeneratorConfig, GenerationResult]:
    """Resolve config, load the project and run the pipeline.

    Raises:
        typer.Exit: With the error's exit code when config, sources or the
            manifest cannot be loaded.
    """
    from ruletype.config import resolve_config
    from ruletype.generator import generate
    from ruletype.parser import load_project

    try:
        _, config = resolve_config(
            cli_source_dir=source_dir, cli_output=output, cli_manifest=manifest
        )
        project = load_project(config)
    except RuletypeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(f"Loaded {project.declaration_count()} declarations")
    return config, generate(project, config)


def generate_command(
    source_dir: Optional[str] = typer.Option(
        None, "--source-dir", "-s", help="Root of the PHP sources to scan."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Declaration file to write."
    ),
    manifest: Optional[str] = typer.Option(
        None, "--manifest", "-m", help="JSON/YAML manifest (path, URL or '-')."
    ),
    check: bool = typer.Option(
        False, "--check", help="Fail if the declaration file is out of date."
    ),
    to_stdout: bool = typer.Option(
        False, "--stdout", help="Print declarations instead of writing them."
    ),
) -> None:
    """Generate TypeScript declarations from validation rules and resources.

    Example::

        ruletype generate
        ruletype generate --source-dir app --output resources/types/api.d.ts
        ruletype generate --check
        ruletype generate --stdout > api.d.ts
    """
    from ruletype.generator.emitter import is_up_to_date, render, write_output

    if check and to_stdout:
        error("--check and --stdout cannot be combined.")
        raise typer.Exit(code=2)

    config, result = run_generation(source_dir, output, manifest)
    text = render(result, config)
    target = Path(config.output)

    for name in result.skipped:
        debug(f"Skipped {name}: no fields")
    if result.unresolved_symbols:
        warning(
            "Unresolved type references: " + ", ".join(result.unresolved_symbols)
        )

    if to_stdout:
        print_declarations(text)
        return

    if check:
        if not is_up_to_date(text, target):
            exc = OutputDriftError(f"{target} is out of date.")
            error(str(exc))
            suggest("Regenerate it: ruletype generate")
            raise typer.Exit(code=exc.exit_code)
        success(f"{target} is up to date.")
        return

    try:
        changed = write_output(text, target)
    except OSError as exc:
        error(f"Failed to write {target}: {exc}")
        raise typer.Exit(code=1) from None

    if get_output().format == OutputFormat.JSON:
        get_output().print_structured({
            "output": str(target),
            "changed": changed,
            "declarations": len(result.declarations),
            "unresolved": result.unresolved_symbols,
        })
        return

    if changed:
        success(f"Wrote {len(result.declarations)} declarations to {target}.")
    else:
        info(f"{target} is up to date.")
