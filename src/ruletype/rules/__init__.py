"""Validation-rule type inference.

Turns a rule mapping (field name -> rule strings, lists and rule objects)
into an ordered list of :class:`~ruletype.models.InferredField` objects.

Typical usage::

    from ruletype.models import MissingSymbols
    from ruletype.rules import synthesize_fields

    symbols = MissingSymbols()
    fields = synthesize_fields(
        {"status": "required|in:active,inactive", "tags.*": "string"},
        {},
        symbols,
    )

Sub-modules:

* :mod:`~ruletype.rules.objects` -- rule objects and the manifest mapping.
* :mod:`~ruletype.rules.tokenizer` -- flatten rule specs into tokens.
* :mod:`~ruletype.rules.classifier` -- requiredness, nullability, base types.
* :mod:`~ruletype.rules.enums` -- enum constraints and ``in:`` choices.
* :mod:`~ruletype.rules.definitions` -- ``.*`` folding into parent fields.
* :mod:`~ruletype.rules.synthesizer` -- merge with companion types.
"""

from ruletype.rules.definitions import FieldRuleDefinition, resolve_rule_definitions
from ruletype.rules.synthesizer import synthesize, synthesize_fields
from ruletype.rules.tokenizer import normalize

__all__ = [
    "FieldRuleDefinition",
    "normalize",
    "resolve_rule_definitions",
    "synthesize",
    "synthesize_fields",
]
