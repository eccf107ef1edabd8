"""Merge rule-derived and companion types into the final field list.

For every :class:`~ruletype.rules.definitions.FieldRuleDefinition` the
synthesizer decides one TypeScript type and an optional flag:

1. An enum or choice resolved from the rules always wins.
2. Otherwise the rule-derived type wins, unless it is missing or ambiguous
   (mentions ``unknown``/``any``) and the companion declares something more
   specific.
3. A missing type becomes ``unknown``.
4. Fields without a ``nullable`` rule lose every top-level ``null`` member,
   including one declared by the companion; nullable fields gain
   ``| null`` when they do not already carry it.

A ``confirmed`` rule adds ``<name>_confirmation`` with the same type and
optionality right after the field, unless that name is declared already.
"""

from __future__ import annotations

from typing import Any, Collection, Mapping, Optional

from ruletype.models import InferredField, MissingSymbols
from ruletype.rules.classifier import has_confirmed_rule, infer_rule_type, is_optional
from ruletype.rules.definitions import FieldRuleDefinition, resolve_rule_definitions
from ruletype.rules.enums import resolve_enum_or_choice
from ruletype.typescript import UNKNOWN, apply_nullability, is_ambiguous, strip_null

CONFIRMATION_SUFFIX = "_confirmation"


def resolve_field_type(
    definition: FieldRuleDefinition,
    companion_type: Optional[str],
    missing_symbols: MissingSymbols,
) -> str:
    """Pick the type of one field before nullability is applied."""
    pinned = resolve_enum_or_choice(definition.tokens, missing_symbols)
    if pinned is not None:
        return pinned

    rule_type = infer_rule_type(
        definition.tokens, definition.array_item_tokens, missing_symbols
    )
    if rule_type is None:
        return companion_type or UNKNOWN
    if companion_type and is_ambiguous(rule_type) and not is_ambiguous(companion_type):
        return companion_type
    return rule_type


def synthesize(
    definition: FieldRuleDefinition,
    companion_type: Optional[str],
    missing_symbols: MissingSymbols,
    declared: Collection[str] = (),
) -> list[InferredField]:
    """Produce the field for *definition*, plus its confirmation field if any.

    Args:
        definition: The field's normalised rules.
        companion_type: TypeScript type declared for this field by the
            companion structure, or ``None``.
        missing_symbols: Receives enum references.
        declared: Field names that already exist; a confirmation field with
            one of these names is not generated.

    Returns:
        One or two :class:`~ruletype.models.InferredField` objects.
    """
    ts_type = resolve_field_type(definition, companion_type, missing_symbols)
    if not definition.nullable:
        ts_type = strip_null(ts_type)
    ts_type = apply_nullability(ts_type, definition.nullable)

    inferred = InferredField(
        name=definition.name,
        type=ts_type,
        optional=is_optional(definition.required, definition.tokens),
    )
    fields = [inferred]

    if has_confirmed_rule(definition.tokens):
        confirmation = definition.name + CONFIRMATION_SUFFIX
        if confirmation not in declared:
            fields.append(
                InferredField(name=confirmation, type=inferred.type, optional=inferred.optional)
            )

    return fields


def synthesize_fields(
    rules: Mapping[Any, Any],
    companion_types: Mapping[str, str],
    missing_symbols: MissingSymbols,
) -> list[InferredField]:
    """Run the whole rule pipeline for one rule mapping.

    Args:
        rules: Field name to rule specification.
        companion_types: Field name to companion TypeScript type.
        missing_symbols: Receives every enum reference.

    Returns:
        The ordered field list.

    Example::

        synthesize_fields(
            {"role": ["required", EnumValueRule("App\\\\Enums\\\\Role")]},
            {},
            symbols,
        )
        # [InferredField(name="role", type="Role", optional=False)]
    """
    definitions = resolve_rule_definitions(rules)
    fields: list[InferredField] = []
    emitted: set[str] = set()

    for name, definition in definitions.items():
        declared = emitted | definitions.keys()
        for inferred in synthesize(
            definition, companion_types.get(name), missing_symbols, declared
        ):
            fields.append(inferred)
            emitted.add(inferred.name)

    return fields
