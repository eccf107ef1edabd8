"""Render a :class:`~ruletype.generator.pipeline.GenerationResult` as ``.d.ts`` text.

Output is deterministic: declarations appear sorted by name, each resource
and collection is followed by its ``<Name>Response`` alias, and the
``ApiResponse<T>`` envelope is emitted first whenever an alias refers to it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ruletype.config import atomic_write
from ruletype.generator.pipeline import GenerationResult
from ruletype.models import DeclarationKind, GeneratorConfig, InferredField, TypeDeclaration
from ruletype.typescript import UNKNOWN, format_property_name, quote_literal, unwrap_array

logger = logging.getLogger(__name__)

INDENT = "    "

API_RESPONSE_PRELUDE = (
    "export type ApiResponse<T> =\n"
    "    | { success: true; message: string; data: T }\n"
    "    | { success: false; message: string; errors?: Record<string, unknown> };"
)


def render(result: GenerationResult, config: Optional[GeneratorConfig] = None) -> str:
    """Render every declaration in *result* as one TypeScript declaration file.

    Args:
        result: Output of :func:`~ruletype.generator.pipeline.generate`.
        config: Controls ``native_enums``; defaults apply when omitted.

    Returns:
        The file text, ending in a single newline.
    """
    config = config or GeneratorConfig()
    blocks: list[str] = []

    if result.uses_api_response:
        blocks.append(API_RESPONSE_PRELUDE)

    for declaration in result.declarations:
        blocks.append(render_declaration(declaration, native_enums=config.native_enums))
        if declaration.response_alias:
            blocks.append(
                f"export type {declaration.name}Response = ApiResponse<{declaration.name}>;"
            )

    return "\n".join(blocks) + "\n"


def render_declaration(declaration: TypeDeclaration, native_enums: bool = False) -> str:
    """Render a single declaration (without its response alias)."""
    if declaration.kind is DeclarationKind.ENUM:
        if native_enums:
            return _render_native_enum(declaration)
        return f"export type {declaration.name} = {declaration.body or 'never'};"

    if declaration.kind is DeclarationKind.COLLECTION:
        item = unwrap_array(declaration.body or "") or UNKNOWN
        return f"export type {declaration.name} =\n{paginated_collection_type(item)};"

    return f"export type {declaration.name} = {render_object(declaration.fields)};"


def render_field(declaration_field: InferredField, indent: str = INDENT) -> str:
    optional = "?" if declaration_field.optional else ""
    name = format_property_name(declaration_field.name)
    return f"{indent}{name}{optional}: {declaration_field.type};"


def render_object(fields: list[InferredField]) -> str:
    if not fields:
        return "{}"
    lines = [render_field(declaration_field) for declaration_field in fields]
    return "{\n" + "\n".join(lines) + "\n}"


def paginated_collection_type(item: str) -> str:
    """Union of the plain array and the paginated ``{data, links, meta}`` envelope."""
    pad = INDENT + "      "
    return "\n".join([
        f"{INDENT}| Array<{item}>",
        f"{INDENT}| {{",
        f"{pad}data: Array<{item}>;",
        f"{pad}links: {{",
        f"{pad}{INDENT}first?: string;",
        f"{pad}{INDENT}last?: string;",
        f"{pad}{INDENT}prev?: string | null;",
        f"{pad}{INDENT}next?: string | null;",
        f"{pad}}};",
        f"{pad}meta: {{",
        f"{pad}{INDENT}current_page: number;",
        f"{pad}{INDENT}from?: number | null;",
        f"{pad}{INDENT}last_page: number;",
        f"{pad}{INDENT}path: string;",
        f"{pad}{INDENT}per_page: number;",
        f"{pad}{INDENT}to?: number | null;",
        f"{pad}{INDENT}total: number;",
        f"{pad}}};",
        f"{INDENT}  }}",
    ])


def _render_native_enum(declaration: TypeDeclaration) -> str:
    members = []
    for label, value in declaration.enum_cases.items():
        rendered = quote_literal(value) if isinstance(value, str) else str(value)
        members.append(f"{INDENT}{label} = {rendered},")
    if not members:
        return f"export enum {declaration.name} {{}}"
    return f"export enum {declaration.name} {{\n" + "\n".join(members) + "\n}"


def write_output(text: str, path: Path) -> bool:
    """Write *text* to *path* unless it already holds exactly that content.

    Returns:
        ``True`` when the file was created or changed, ``False`` when it was
        already up to date.
    """
    if is_up_to_date(text, path):
        logger.debug("%s is up to date", path)
        return False

    atomic_write(path, text)
    return True


def is_up_to_date(text: str, path: Path) -> bool:
    """Return ``True`` when *path* exists and holds exactly *text*."""
    if not path.is_file():
        return False
    try:
        return path.read_text(encoding="utf-8") == text
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read existing %s: %s", path, exc)
        return False
