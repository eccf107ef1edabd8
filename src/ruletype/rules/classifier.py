"""Classify rule tokens: requiredness, nullability, and the base TypeScript type.

Instruction names are compared case-insensitively with their colon
parameters removed (``"max:255"`` -> ``"max"``). Rule objects that did not
render to a string take no part in name matching.

Type inference follows a fixed precedence -- enum constraint, choice
(``in:``), array, then the boolean, number, file, json and string groups --
and returns ``None`` when nothing matches so that the synthesizer can fall
back to a companion type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ruletype.models import MissingSymbols
from ruletype.rules.enums import resolve_choice, resolve_enum
from ruletype.rules.tokenizer import RuleToken, parse_rule_string
from ruletype.typescript import UNKNOWN, array_of

ARRAY_RULES = frozenset({"array", "list"})
BOOLEAN_RULES = frozenset({"boolean", "accepted", "declined"})
NUMBER_RULES = frozenset({"integer", "numeric", "decimal", "digits", "digits_between"})
FILE_RULES = frozenset({"file", "image", "mimes", "mimetypes"})
JSON_RULES = frozenset({"json"})
STRING_RULES = frozenset({
    "string",
    "email",
    "uuid",
    "ulid",
    "date",
    "date_format",
    "timezone",
    "ip",
    "mac_address",
    "url",
    "active_url",
    "regex",
    "alpha",
    "alpha_num",
    "alpha_dash",
    "starts_with",
    "ends_with",
    "password",
    "current_password",
})

# (rule group, TypeScript type), consulted in order after enums/choices/arrays.
_SCALAR_GROUPS: tuple[tuple[frozenset[str], str], ...] = (
    (BOOLEAN_RULES, "boolean"),
    (NUMBER_RULES, "number"),
    (FILE_RULES, "File"),
    (JSON_RULES, "Record<string, unknown>"),
    (STRING_RULES, "string"),
)


@dataclass(frozen=True)
class Classification:
    """Presence flags derived from one field's tokens."""

    required: bool
    nullable: bool

    @property
    def optional(self) -> bool:
        return not self.required


def rule_names(tokens: Iterable[RuleToken]) -> list[str]:
    """Return the unique lowercase instruction names of the string tokens."""
    names: dict[str, None] = {}
    for token in tokens:
        if isinstance(token, str):
            name, _ = parse_rule_string(token)
            names[name] = None
    return list(names)


def has_rule(names: Iterable[str], group: Iterable[str]) -> bool:
    return not set(names).isdisjoint(group)


def is_required(tokens: Sequence[RuleToken]) -> bool:
    """``required``/``present`` make a field required unless ``sometimes`` is present."""
    names = rule_names(tokens)
    if "sometimes" in names:
        return False
    return "required" in names or "present" in names


def is_nullable(tokens: Sequence[RuleToken]) -> bool:
    return "nullable" in rule_names(tokens)


def is_optional(required: bool, tokens: Sequence[RuleToken]) -> bool:
    """A field is optional when it is ``sometimes`` validated or not required."""
    if "sometimes" in rule_names(tokens):
        return True
    return not required


def classify(tokens: Sequence[RuleToken]) -> Classification:
    return Classification(required=is_required(tokens), nullable=is_nullable(tokens))


def has_confirmed_rule(tokens: Sequence[RuleToken]) -> bool:
    return "confirmed" in rule_names(tokens)


def infer_rule_type(
    tokens: Sequence[RuleToken],
    array_item_tokens: Optional[Sequence[RuleToken]],
    missing_symbols: MissingSymbols,
) -> Optional[str]:
    """Infer a TypeScript type from one field's rule tokens.

    Args:
        tokens: The field's own tokens.
        array_item_tokens: Tokens folded in from a ``field.*`` rule, or
            ``None`` when the field has no item rules.
        missing_symbols: Receives enum references found along the way.

    Returns:
        The inferred type, or ``None`` when no rule says anything about it.

    Example::

        infer_rule_type(["array"], ["integer"], symbols)   # "Array<number>"
        infer_rule_type(["array"], None, symbols)          # "Array<unknown>"
        infer_rule_type(["max:10"], None, symbols)         # None
    """
    enum_type = resolve_enum(tokens, missing_symbols)
    if enum_type is not None:
        return enum_type

    choice_type = resolve_choice(tokens)
    if choice_type is not None:
        return choice_type

    names = rule_names(tokens)

    if has_rule(names, ARRAY_RULES) or array_item_tokens is not None:
        item_type = None
        if array_item_tokens:
            item_type = infer_rule_type(array_item_tokens, None, missing_symbols)
        return array_of(item_type or UNKNOWN)

    for group, ts_type in _SCALAR_GROUPS:
        if has_rule(names, group):
            return ts_type

    return None
