"""Rule objects that can appear in a rule set next to plain rule strings.

A rule set is a mix of ``"required|string"``-style strings, nested lists,
and objects. Objects fall into three groups:

* **Enum constraints** (:class:`EnumRule`, :class:`EnumValueRule`) satisfy
  the :class:`HasTypeReference` protocol. The tokenizer keeps them as
  structured tokens and the enum resolver reads their type reference.
* **Stringable rules** (:class:`StringableRule`, :class:`InRule`) render
  themselves as a rule string (``unique:users,email``, ``in:"a","b"``) and
  are tokenized as such.
* **Opaque rules** (:class:`OpaqueRule`) carry only their source text and
  contribute nothing to inference.

:func:`rule_from_mapping` builds these from the JSON/YAML manifest form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class HasTypeReference(Protocol):
    """Capability of rule objects that constrain a value to a named type."""

    def type_reference(self) -> Optional[str]:
        """Return the (possibly namespaced) referenced type name, or ``None``."""
        ...


@dataclass(frozen=True)
class EnumRule:
    """Constrains a value to the cases of a native enum (``Rule::enum(X::class)``)."""

    type: str

    def type_reference(self) -> Optional[str]:
        return self.type or None


@dataclass(frozen=True)
class EnumValueRule:
    """Constrains a value to a class-based enum (``new EnumRule(X::class)``)."""

    enum: str

    def type_reference(self) -> Optional[str]:
        return self.enum or None


@dataclass(frozen=True)
class StringableRule:
    """A rule object whose string form is ``name[:p1,p2,...]``."""

    name: str
    parameters: tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}:{','.join(self.parameters)}"


@dataclass(frozen=True)
class InRule:
    """Choice rule rendered with quoted values: ``in:"a","b"``."""

    values: tuple[str, ...]

    def __str__(self) -> str:
        quoted = ['"' + value.replace('"', '""') + '"' for value in self.values]
        return "in:" + ",".join(quoted)


@dataclass(frozen=True)
class OpaqueRule:
    """A rule that could not be interpreted; kept only for diagnostics."""

    source: str


def is_enum_constraint(rule: object) -> bool:
    return isinstance(rule, HasTypeReference)


def has_string_form(rule: object) -> bool:
    """Return ``True`` when *rule*'s class defines its own ``__str__``."""
    return type(rule).__str__ is not object.__str__


def rule_from_mapping(data: dict[str, Any]) -> object:
    """Build a rule object from its manifest mapping.

    Recognised shapes::

        {"enum": "App\\\\Enums\\\\Status"}             -> EnumRule
        {"enum_value": "App\\\\Enums\\\\UserRole"}     -> EnumValueRule
        {"in": ["draft", "published"]}               -> InRule
        {"rule": "unique", "parameters": ["users"]}  -> StringableRule

    Anything else becomes an :class:`OpaqueRule`.
    """
    if isinstance(data.get("enum"), str):
        return EnumRule(data["enum"])
    if isinstance(data.get("enum_value"), str):
        return EnumValueRule(data["enum_value"])
    if isinstance(data.get("in"), list):
        return InRule(tuple(_scalar_to_str(value) for value in data["in"]))
    if isinstance(data.get("rule"), str):
        parameters = data.get("parameters") or []
        if not isinstance(parameters, list):
            parameters = [parameters]
        return StringableRule(
            data["rule"], tuple(_scalar_to_str(p) for p in parameters)
        )
    return OpaqueRule(repr(data))


def coerce_rule_spec(spec: Any) -> Any:
    """Recursively replace mappings in a manifest rule spec with rule objects."""
    if isinstance(spec, dict):
        return rule_from_mapping(spec)
    if isinstance(spec, list):
        return [coerce_rule_spec(item) for item in spec]
    return spec


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
