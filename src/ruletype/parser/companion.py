"""Translate PHP and docblock types into TypeScript type expressions.

Companion types are the types declared *next to* the code ruletype infers
from: ``@property`` tags on a form request and the typed properties of a
data object. They fill in fields whose rules or expressions are ambiguous.
"""

from __future__ import annotations

import re
from typing import Optional

from ruletype.models import MissingSymbols
from ruletype.typescript import (
    NULL,
    UNKNOWN,
    array_of,
    has_null,
    join_union,
    split_top_level,
    split_union,
    strip_null,
)

DATE_CLASSES = frozenset({
    "Carbon",
    "CarbonImmutable",
    "CarbonInterface",
    "DateTime",
    "DateTimeImmutable",
    "DateTimeInterface",
})

_SCALARS = {
    "int": "number",
    "integer": "number",
    "float": "number",
    "double": "number",
    "positive-int": "number",
    "negative-int": "number",
    "numeric": "number",
    "string": "string",
    "class-string": "string",
    "non-empty-string": "string",
    "bool": "boolean",
    "boolean": "boolean",
    "true": "boolean",
    "false": "boolean",
    "null": NULL,
    "void": NULL,
    "mixed": UNKNOWN,
    "object": UNKNOWN,
    "self": UNKNOWN,
    "static": UNKNOWN,
    "array": array_of(UNKNOWN),
    "iterable": array_of(UNKNOWN),
    "list": array_of(UNKNOWN),
    "non-empty-array": array_of(UNKNOWN),
    "non-empty-list": array_of(UNKNOWN),
}

_LIST_GENERICS = frozenset({"array", "list", "iterable", "non-empty-array", "non-empty-list", "collection"})
_GENERIC_RE = re.compile(r"^([\\A-Za-z0-9_-]+)\s*<(.*)>$", re.DOTALL)


def php_type_to_ts(
    type_expr: Optional[str],
    missing_symbols: MissingSymbols,
    *,
    null_as_optional: bool = False,
) -> str:
    """Translate a PHP type into a TypeScript type expression.

    Class names become their short name and are recorded in
    *missing_symbols*, except date classes which serialise as ``string``.

    Args:
        type_expr: A native or docblock type such as ``?int``,
            ``Carbon|null`` or ``array<int, \\App\\Data\\TagData>``.
        missing_symbols: Receives every referenced class.
        null_as_optional: Drop top-level ``null`` members; the caller makes
            the field optional instead.

    Returns:
        The TypeScript type, ``unknown`` for an empty input.

    Example::

        php_type_to_ts("?\\Illuminate\\Support\\Carbon", MissingSymbols())
        # "string | null"
    """
    if not type_expr or not type_expr.strip():
        return UNKNOWN

    translated = _translate(type_expr.strip(), missing_symbols)
    if null_as_optional:
        return strip_null(translated)
    return translated


def is_nullable_type(type_expr: Optional[str]) -> bool:
    """Return ``True`` when a PHP type admits ``null`` (``?X`` or ``X|null``)."""
    if not type_expr:
        return False
    text = type_expr.strip()
    if text.startswith("?"):
        return True
    return has_null(text.lower())


def _translate(text: str, missing_symbols: MissingSymbols) -> str:
    if text.startswith("?"):
        return join_union([_translate(text[1:], missing_symbols), NULL])

    members = split_union(text)
    if len(members) > 1:
        translated: list[str] = []
        for member in members:
            translated.extend(split_union(_translate(member, missing_symbols)))
        return join_union(translated)

    # Intersections have no TypeScript counterpart here; keep the first part.
    text = split_top_level(text, "&")[0].strip()
    if text.startswith("(") and text.endswith(")"):
        return _translate(text[1:-1], missing_symbols)

    if text.endswith("[]"):
        return array_of(_translate(text[:-2], missing_symbols))

    generic = _GENERIC_RE.match(text)
    if generic is not None:
        return _translate_generic(generic.group(1), generic.group(2), missing_symbols)

    lowered = text.lower()
    if lowered in _SCALARS:
        return _SCALARS[lowered]

    short = text.rstrip("\\").rsplit("\\", 1)[-1]
    if short in DATE_CLASSES:
        return "string"
    return missing_symbols.add(text)


def _translate_generic(base: str, arguments: str, missing_symbols: MissingSymbols) -> str:
    short = base.rsplit("\\", 1)[-1].lower()
    params = [param.strip() for param in split_top_level(arguments, ",") if param.strip()]
    if short not in _LIST_GENERICS or not params:
        return UNKNOWN

    if len(params) == 1:
        return array_of(_translate(params[0], missing_symbols))

    key, value = params[0], params[-1]
    value_type = _translate(value, missing_symbols)
    if key.lower() in ("string", "non-empty-string", "class-string"):
        return f"Record<string, {value_type}>"
    return array_of(value_type)
