"""Fold a raw rule mapping into per-field rule definitions.

A rule mapping is keyed by dot-path field names. Keys ending in ``.*``
describe the *elements* of their parent array field: their tokens are
collected as the parent's ``array_item_tokens`` and no standalone field is
produced for them. A parent that only appears through its ``.*`` rules is
appended after the declared fields with ``required`` and ``nullable`` set to
``False``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ruletype.rules.classifier import is_nullable, is_required
from ruletype.rules.tokenizer import RuleToken, normalize

ARRAY_ITEM_SUFFIX = ".*"


@dataclass
class FieldRuleDefinition:
    """Normalised rules for one field.

    Attributes:
        name: Dot-path field name (never ending in ``.*``).
        tokens: The field's rule tokens in declaration order.
        required: Result of :func:`~ruletype.rules.classifier.is_required`.
        nullable: Result of :func:`~ruletype.rules.classifier.is_nullable`.
        array_item_tokens: Tokens of the matching ``name.*`` rules, or
            ``None`` when there are none.
    """

    name: str
    tokens: list[RuleToken] = field(default_factory=list)
    required: bool = False
    nullable: bool = False
    array_item_tokens: Optional[list[RuleToken]] = None


def is_array_item_field(name: str) -> bool:
    return name.endswith(ARRAY_ITEM_SUFFIX)


def array_parent_field(name: str) -> str:
    return name[: -len(ARRAY_ITEM_SUFFIX)]


def resolve_rule_definitions(rules: Mapping[Any, Any]) -> dict[str, FieldRuleDefinition]:
    """Build ordered :class:`FieldRuleDefinition` objects from a rule mapping.

    Non-string keys are ignored.

    Example::

        defs = resolve_rule_definitions({
            "tags": "array",
            "tags.*": "string|max:20",
        })
        defs["tags"].array_item_tokens   # ["string", "max:20"]
        "tags.*" in defs                 # False
    """
    definitions: dict[str, FieldRuleDefinition] = {}
    item_tokens: dict[str, list[RuleToken]] = {}

    for name, rule_set in rules.items():
        if not isinstance(name, str):
            continue

        if is_array_item_field(name):
            parent = array_parent_field(name)
            item_tokens.setdefault(parent, []).extend(normalize(rule_set))
            continue

        tokens = normalize(rule_set)
        definitions[name] = FieldRuleDefinition(
            name=name,
            tokens=tokens,
            required=is_required(tokens),
            nullable=is_nullable(tokens),
        )

    for parent, tokens in item_tokens.items():
        definition = definitions.setdefault(parent, FieldRuleDefinition(name=parent))
        definition.array_item_tokens = tokens

    return definitions
