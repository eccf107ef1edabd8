"""Helpers for manipulating TypeScript type expressions as text.

Types flow through ruletype as plain strings (``"string | null"``,
``"Array<UserResource>"``, ``"'a' | 'b'"``). The helpers here split and join
unions at the top level only, so that nested generics and quoted literals
are never torn apart: stripping ``null`` from ``Array<string | null>``
leaves it untouched, while ``string | null`` becomes ``string``.
"""

from __future__ import annotations

import re
from typing import Optional

UNKNOWN = "unknown"
NULL = "null"

_OPENERS = {"<": ">", "(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_AMBIGUOUS_RE = re.compile(r"\b(?:unknown|any)\b")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def split_top_level(text: str, separator: str) -> list[str]:
    """Split *text* on a single-character *separator* outside brackets and quotes.

    Args:
        text: The text to split.
        separator: A one-character separator such as ``"|"`` or ``","``.

    Returns:
        The raw (untrimmed) parts. A text without separators yields a
        one-element list.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: Optional[str] = None
    escaped = False

    for ch in text:
        if quote is not None:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in ("'", '"'):
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue

        current.append(ch)

    parts.append("".join(current))
    return parts


def split_union(type_expr: str) -> list[str]:
    """Return the trimmed, non-empty top-level members of a union type."""
    return [part.strip() for part in split_top_level(type_expr, "|") if part.strip()]


def join_union(members: list[str]) -> str:
    """Join union members with ``" | "``, dropping duplicates but keeping order."""
    return " | ".join(dict.fromkeys(members))


def has_null(type_expr: str) -> bool:
    """Return ``True`` when ``null`` is a top-level member of *type_expr*."""
    return NULL in split_union(type_expr)


def strip_null(type_expr: str) -> str:
    """Remove top-level ``null`` members from a union.

    A type that is not a union is returned unchanged. A union made only of
    ``null`` collapses to ``unknown``.
    """
    members = split_union(type_expr)
    if len(members) < 2:
        return type_expr

    kept = [member for member in members if member != NULL]
    if not kept:
        return UNKNOWN
    return join_union(kept)


def apply_nullability(type_expr: str, nullable: bool) -> str:
    """Append ``| null`` to *type_expr* when *nullable* and not already present."""
    if not nullable or has_null(type_expr):
        return type_expr
    return f"{type_expr} | {NULL}"


def is_ambiguous(type_expr: Optional[str]) -> bool:
    """Return ``True`` for missing types or types that mention ``unknown``/``any``."""
    if not type_expr:
        return True
    return _AMBIGUOUS_RE.search(type_expr) is not None


def array_of(item_type: str) -> str:
    return f"Array<{item_type}>"


def unwrap_array(type_expr: str) -> Optional[str]:
    """Return ``T`` for a type that is exactly ``Array<T>``, else ``None``."""
    text = type_expr.strip()
    if not (text.startswith("Array<") and text.endswith(">")):
        return None

    inner = text[len("Array<"):-1]
    # "Array<A> | Array<B>" also starts and ends right; reject unbalanced inners.
    depth = 0
    for ch in inner:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
            if depth < 0:
                return None
    return inner if depth == 0 else None


def quote_literal(value: str) -> str:
    """Render *value* as a single-quoted TypeScript string literal."""
    return "'" + value.replace("'", "\\'") + "'"


def format_property_name(name: str) -> str:
    """Quote property names that are not valid identifiers (e.g. ``items.*.id``)."""
    if _IDENTIFIER_RE.match(name):
        return name
    return quote_literal(name)


# Generic and global names that never need a declaration.
BUILTIN_TYPE_NAMES = frozenset({"Array", "Record", "File", "Partial", "Readonly", "ApiResponse"})
_TYPE_NAME_RE = re.compile(r"\b[A-Z][A-Za-z0-9_]*\b")


def referenced_types(type_expr: str) -> list[str]:
    """Return the named types *type_expr* refers to, ignoring literals and builtins.

    Example::

        referenced_types("Array<TagResource> | 'Draft' | null")
        # ["TagResource"]
    """
    names: list[str] = []
    unquoted = _strip_string_literals(type_expr)
    for name in _TYPE_NAME_RE.findall(unquoted):
        if name not in BUILTIN_TYPE_NAMES and name not in names:
            names.append(name)
    return names


def _strip_string_literals(text: str) -> str:
    out: list[str] = []
    quote: Optional[str] = None
    escaped = False
    for ch in text:
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            continue
        out.append(ch)
    return "".join(out)
