"""Resolve enum-constraint and choice rules into TypeScript types.

Two kinds of rules pin a field to a closed set of values:

* **Enum constraints** -- rule objects satisfying
  :class:`~ruletype.rules.objects.HasTypeReference`, or the string form
  ``enum:App\\Enums\\Status``. They resolve to the enum's short name, and the
  fully-qualified reference is recorded in
  :class:`~ruletype.models.MissingSymbols` so the emitter can make sure it is
  declared.
* **Choices** -- ``in:a,b,c`` strings (including the quoted form produced by
  :class:`~ruletype.rules.objects.InRule`). They resolve to a union of
  literals such as ``'draft' | 'published'``.

The first enum constraint in token order wins; choices are only consulted when
no enum constraint exists.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from ruletype.models import MissingSymbols
from ruletype.rules.objects import is_enum_constraint
from ruletype.rules.tokenizer import RuleToken, parse_rule_string
from ruletype.typescript import join_union, quote_literal

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def resolve_enum_or_choice(
    tokens: Sequence[RuleToken], missing_symbols: MissingSymbols
) -> Optional[str]:
    """Return the enum or literal-union type pinned by *tokens*, or ``None``."""
    enum_type = resolve_enum(tokens, missing_symbols)
    if enum_type is not None:
        return enum_type
    return resolve_choice(tokens)


def resolve_enum(
    tokens: Sequence[RuleToken], missing_symbols: MissingSymbols
) -> Optional[str]:
    """Return the short name of the first enum referenced by *tokens*.

    Args:
        tokens: Normalised rule tokens for one field.
        missing_symbols: Receives the fully-qualified enum reference.

    Returns:
        The enum's short name (``"UserRole"`` for ``App\\Enums\\UserRole``),
        or ``None`` when no enum constraint is present.
    """
    for token in tokens:
        reference: Optional[str] = None

        if isinstance(token, str):
            name, parameters = parse_rule_string(token)
            if name == "enum" and parameters is not None:
                reference = parameters.split(",", 1)[0]
        elif is_enum_constraint(token):
            reference = _read_type_reference(token)

        if reference is None:
            continue
        reference = reference.strip().lstrip("\\")
        if reference:
            return missing_symbols.add(reference)

    return None


def resolve_choice(tokens: Sequence[RuleToken]) -> Optional[str]:
    """Return a literal union for the first ``in:`` rule in *tokens*, or ``None``.

    Example::

        resolve_choice(["required", "in:active,inactive,1,true"])
        # "'active' | 'inactive' | 1 | true"
    """
    for token in tokens:
        if not isinstance(token, str):
            continue

        name, parameters = parse_rule_string(token)
        if name != "in" or parameters is None:
            continue

        literals = [value_to_literal(value) for value in parse_in_values(parameters)]
        if literals:
            return join_union(literals)

    return None


def parse_in_values(parameters: str) -> list[str]:
    """Split the parameters of an ``in:`` rule into trimmed values.

    Values are comma-separated. A value may be wrapped in double quotes, in
    which case commas inside it are literal, a backslash escapes the next
    character, and a doubled quote (``""``) stands for one quote.
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(parameters)

    while i < length:
        ch = parameters[i]

        if in_quotes:
            if ch == "\\" and i + 1 < length:
                current.append(parameters[i + 1])
                i += 2
                continue
            if ch == '"':
                if i + 1 < length and parameters[i + 1] == '"':
                    current.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                current.append(ch)
            i += 1
            continue

        if ch == '"' and not "".join(current).strip():
            in_quotes = True
            current = []
        elif ch == ",":
            values.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    values.append("".join(current).strip())
    return values


def value_to_literal(value: str) -> str:
    """Render one choice value as a TypeScript literal type."""
    if value == "":
        return "''"

    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered

    if _NUMERIC_RE.match(value):
        return value

    return quote_literal(value)


def _read_type_reference(rule: object) -> Optional[str]:
    try:
        reference = rule.type_reference()  # type: ignore[attr-defined]
    except Exception as exc:
        logger.debug("Ignoring malformed enum rule %r: %s", rule, exc)
        return None
    return reference if isinstance(reference, str) else None
