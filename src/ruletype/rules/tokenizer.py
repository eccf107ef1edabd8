"""Normalise heterogeneous rule specifications into a flat token list.

Rule sets arrive in several shapes: pipe-delimited strings
(``"required|string|max:255"``), lists (possibly nested) of strings and
objects, and rule objects. :func:`normalize` flattens all of them, in
declaration order, into a list of *rule tokens*: strings of the form
``name[:parameters]`` plus the structured objects that must survive for later
type extraction (enum constraints and opaque rules).
"""

from __future__ import annotations

from typing import Any, Union

from ruletype.rules.objects import has_string_form, is_enum_constraint

RuleToken = Union[str, object]


def normalize(raw_rules: Any) -> list[RuleToken]:
    """Flatten *raw_rules* into an ordered list of rule tokens.

    * Lists and tuples are flattened depth-first, to any nesting depth.
    * Strings are split on ``|``; each trimmed, non-empty segment is a token.
    * Objects with their own string form that are not enum constraints are
      converted with :func:`str` and treated as a string token.
    * Any other object is kept as-is.

    Never raises: ``None`` and blank strings simply produce no tokens.

    Args:
        raw_rules: A rule string, a (nested) list of rules, or a rule object.

    Returns:
        The flat token list.

    Example::

        normalize(["required", ["string|max:255"], EnumRule("Role")])
        # ["required", "string", "max:255", EnumRule(type="Role")]
    """
    tokens: list[RuleToken] = []
    _append(raw_rules, tokens)
    return tokens


def _append(rule: Any, tokens: list[RuleToken]) -> None:
    if rule is None:
        return

    if isinstance(rule, (list, tuple)):
        for nested in rule:
            _append(nested, tokens)
        return

    if isinstance(rule, str):
        for segment in rule.split("|"):
            segment = segment.strip()
            if segment:
                tokens.append(segment)
        return

    if has_string_form(rule) and not is_enum_constraint(rule):
        text = str(rule).strip()
        if text:
            tokens.append(text)
        return

    tokens.append(rule)


def parse_rule_string(token: str) -> tuple[str, str | None]:
    """Split a string token into its lowercase name and raw parameters.

    ``"max:255"`` becomes ``("max", "255")`` and ``"Required"`` becomes
    ``("required", None)``. Only the first colon separates, so
    ``"regex:/^a:b$/"`` keeps its colon in the parameters.
    """
    name, sep, parameters = token.partition(":")
    return name.strip().lower(), (parameters if sep else None)
