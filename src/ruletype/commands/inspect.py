"""Inspect commands -- examine inferred declarations without writing them.

Provides the ``ruletype inspect`` sub-command group. Every sub-command runs
the same scan and inference as ``ruletype generate`` and presents a slice
of the result as a table: the fields of one request, the fields of one
resource, or every type name the declarations reference.
"""

from __future__ import annotations

from typing import Optional

import typer

from ruletype.commands.generate import run_generation
from ruletype.models import DeclarationKind, TypeDeclaration
from ruletype.output import error, get_output, info, suggest


inspect_app = typer.Typer(no_args_is_help=True)


def _find_declaration(
    name: str,
    kind: DeclarationKind,
    source_dir: Optional[str],
    manifest: Optional[str],
) -> TypeDeclaration:
    """Run inference and return the *kind* declaration called *name*.

    Raises:
        typer.Exit: With code 2 when no such declaration was generated.
    """
    _, result = run_generation(source_dir=source_dir, manifest=manifest)

    declaration = result.get(name)
    if declaration is None or declaration.kind is not kind:
        error(f"No {kind.value} named '{name}'.")
        if name in result.skipped:
            info(f"'{name}' was found but produced no fields.")
        else:
            suggest("List what was found: ruletype inspect symbols")
        raise typer.Exit(code=2)
    return declaration


def _print_fields(declaration: TypeDeclaration) -> None:
    rows = [
        [declaration_field.name, declaration_field.type, "Yes" if declaration_field.optional else ""]
        for declaration_field in declaration.fields
    ]
    get_output().print_table(
        ["Field", "Type", "Optional"],
        rows,
        title=f"{declaration.name} ({len(rows)} fields)",
    )


@inspect_app.command("request")
def inspect_request(
    name: str = typer.Argument(..., help="Short class name of the form request."),
    source_dir: Optional[str] = typer.Option(
        None, "--source-dir", "-s", help="Root of the PHP sources to scan."
    ),
    manifest: Optional[str] = typer.Option(
        None, "--manifest", "-m", help="JSON/YAML manifest (path, URL or '-')."
    ),
) -> None:
    """Show the fields inferred from a form request's rules.

    Example::

        ruletype inspect request StoreUserRequest
    """
    _print_fields(_find_declaration(name, DeclarationKind.REQUEST, source_dir, manifest))


@inspect_app.command("resource")
def inspect_resource(
    name: str = typer.Argument(..., help="Short class name of the JSON resource."),
    source_dir: Optional[str] = typer.Option(
        None, "--source-dir", "-s", help="Root of the PHP sources to scan."
    ),
    manifest: Optional[str] = typer.Option(
        None, "--manifest", "-m", help="JSON/YAML manifest (path, URL or '-')."
    ),
) -> None:
    """Show the fields inferred from a resource's ``toArray`` method.

    Example::

        ruletype inspect resource UserResource
    """
    _print_fields(_find_declaration(name, DeclarationKind.RESOURCE, source_dir, manifest))


@inspect_app.command("symbols")
def inspect_symbols(
    source_dir: Optional[str] = typer.Option(
        None, "--source-dir", "-s", help="Root of the PHP sources to scan."
    ),
    manifest: Optional[str] = typer.Option(
        None, "--manifest", "-m", help="JSON/YAML manifest (path, URL or '-')."
    ),
) -> None:
    """List every type name referenced by the generated declarations.

    Names marked as not declared must be provided by hand-written
    TypeScript, or the generated file will not compile.

    Example::

        ruletype inspect symbols
    """
    _, result = run_generation(source_dir=source_dir, manifest=manifest)

    names = result.missing_symbols.short_names()
    if not names:
        info("No type names referenced.")
        return

    declared = result.declared_names
    rows = [[name, "Yes" if name in declared else "No"] for name in names]
    get_output().print_table(["Symbol", "Declared"], rows, title=f"Symbols ({len(rows)})")
