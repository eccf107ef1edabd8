"""Infer TypeScript types for the expressions of a returned array literal.

Inference is an ordered table of :class:`ExpressionRule` entries. Each rule
pairs a regular expression with a resolver; :func:`infer_type` walks
:data:`EXPRESSION_RULES` in order and returns the first non-``None``
resolution. When no rule applies, the companion type for the key (a typed
property of the matching data object) is used, and failing that
``unknown``.

The rules only recognise literal and chained-call idioms. Nothing is
evaluated, so an expression that merely *mentions* a resource class may be
typed as that resource.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from ruletype.models import GeneratorConfig
from ruletype.typescript import NULL, UNKNOWN, array_of, unwrap_array

_CLASS_NAME = r"[A-Za-z_\\][A-Za-z0-9_\\]*"
_CLASS = "(" + _CLASS_NAME + ")"
_CALLBACK = (
    r"\(\s*(?:static\s+)?(?:fn|function)\s*\([^)]*\)"
    r"\s*(?:use\s*\([^)]*\)\s*)?(?::\s*[?A-Za-z0-9_\\]+\s*)?"
    r"(?:=>|\{\s*return)\s*"
)
_PSEUDO_CLASSES = frozenset({"self", "static", "parent"})

_OPTIONAL_RE = re.compile(
    r"\bwhen(?:Loaded|Counted|NotNull|Has|Aggregated|PivotLoaded)?\s*\("
)


@dataclass
class ResourceNaming:
    """Class-name conventions used to recognise resources and collections."""

    resource_suffix: str = "Resource"
    collection_suffix: str = "Collection"
    generic_types: frozenset[str] = field(
        default_factory=lambda: frozenset({"JsonResource"})
    )

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> ResourceNaming:
        """Build naming conventions from a :class:`~ruletype.models.GeneratorConfig`."""
        return cls(
            resource_suffix=config.resource_suffix,
            collection_suffix=config.collection_suffix,
            generic_types=frozenset(config.generic_resource_types),
        )

    def is_resource(self, short: str) -> bool:
        return short.endswith(self.resource_suffix) and short != self.resource_suffix

    def is_collection(self, short: str) -> bool:
        return short.endswith(self.collection_suffix) and short != self.collection_suffix

    def collected_resource(self, short: str) -> str:
        """Map ``UserCollection`` to ``UserResource``; other names pass through."""
        if self.is_collection(short):
            return short[: -len(self.collection_suffix)] + self.resource_suffix
        return short


Resolver = Callable[["re.Match[str]", str, ResourceNaming], Optional[str]]


@dataclass(frozen=True)
class ExpressionRule:
    """One entry of the inference table.

    Attributes:
        name: Identifier used in debug output and tests.
        pattern: Searched (not anchored) against the whole expression.
        resolve: Called with the match, the expression and the naming
            conventions; returns a type or ``None`` to let later rules try.
    """

    name: str
    pattern: re.Pattern[str]
    resolve: Resolver

    def apply(self, expression: str, naming: ResourceNaming) -> Optional[str]:
        match = self.pattern.search(expression)
        if match is None:
            return None
        return self.resolve(match, expression, naming)


def short_class(reference: str) -> str:
    """Return the unqualified name of a (possibly namespaced) class reference."""
    return reference.strip().rstrip("\\").rsplit("\\", 1)[-1]


# --- Resolvers ---


def _resolve_collection_mapping(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    method = match.group("method")
    reference = match.group("new") or match.group("static")
    factory = match.group("factory") or "new"
    short = short_class(reference)

    if factory == "collection":
        if short in _PSEUDO_CLASSES or short in naming.generic_types:
            return None
        element = array_of(naming.collected_resource(short))
    elif naming.is_resource(short):
        element = short
    elif naming.is_collection(short):
        element = array_of(naming.collected_resource(short))
    else:
        return None

    if method == "flatMap":
        element = unwrap_array(element) or element
    return array_of(element)


def _resolve_resource_collection(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    short = short_class(match.group(1))
    if short in _PSEUDO_CLASSES or short in naming.generic_types:
        return None
    return array_of(naming.collected_resource(short))


def _resolve_construction(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    short = short_class(match.group(1))
    if naming.is_collection(short):
        return array_of(naming.collected_resource(short))
    if naming.is_resource(short):
        return short
    return None


def _resolve_factory(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    short = short_class(match.group(1))
    if naming.is_resource(short):
        return short
    return None


def _resolve_generic_collection(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    if short_class(match.group(1)) in naming.generic_types:
        return array_of(UNKNOWN)
    return None


def _resolve_iso8601(
    match: re.Match[str], expression: str, naming: ResourceNaming
) -> Optional[str]:
    if "?->" in expression:
        return f"string | {NULL}"
    return "string"


def _constant(type_expr: str) -> Resolver:
    return lambda match, expression, naming: type_expr


EXPRESSION_RULES: list[ExpressionRule] = [
    ExpressionRule(
        "collection_mapping",
        re.compile(
            r"->\s*(?P<method>map|transform|flatMap)\s*" + _CALLBACK
            + r"(?:new\s+(?P<new>" + _CLASS_NAME + r")\s*\("
            + r"|(?P<static>" + _CLASS_NAME + r")::(?P<factory>make|collection)\s*\()",
            re.DOTALL,
        ),
        _resolve_collection_mapping,
    ),
    ExpressionRule(
        "resource_collection",
        re.compile(_CLASS + r"::collection\s*\("),
        _resolve_resource_collection,
    ),
    ExpressionRule(
        "resource_construction",
        re.compile(r"\bnew\s+" + _CLASS + r"\s*\("),
        _resolve_construction,
    ),
    ExpressionRule(
        "resource_factory",
        re.compile(_CLASS + r"::make\s*\("),
        _resolve_factory,
    ),
    ExpressionRule(
        "generic_collection",
        re.compile(_CLASS + r"::collection\s*\("),
        _resolve_generic_collection,
    ),
    ExpressionRule(
        "map_shorthand",
        re.compile(r"->map->\s*[A-Za-z_]\w*\s*\("),
        _constant(array_of(UNKNOWN)),
    ),
    ExpressionRule(
        "iso8601_string",
        re.compile(r"toIso8601(?:Zulu)?String\(\)"),
        _resolve_iso8601,
    ),
    ExpressionRule(
        "nullsafe_access",
        re.compile(r"\?->"),
        _constant(f"{UNKNOWN} | {NULL}"),
    ),
    ExpressionRule(
        "boolean_literal",
        re.compile(r"^\s*(?:true|false)\s*$", re.IGNORECASE),
        _constant("boolean"),
    ),
    ExpressionRule(
        "number_literal",
        re.compile(r"^\s*-?\d+(?:\.\d+)?\s*$"),
        _constant("number"),
    ),
    ExpressionRule(
        "string_literal",
        re.compile(r"""^\s*(?:'[^']*'|"[^"]*")\s*$"""),
        _constant("string"),
    ),
]


def infer_type(
    expression: str,
    companion_type: Optional[str] = None,
    naming: Optional[ResourceNaming] = None,
) -> str:
    """Infer the TypeScript type of one response expression.

    Args:
        expression: The right-hand side of a ``key => expression`` entry.
        companion_type: The companion data-object type for the same key,
            used when no rule recognises the expression.
        naming: Resource naming conventions; defaults to ``Resource`` /
            ``Collection`` suffixes with ``JsonResource`` as the generic base.

    Returns:
        A TypeScript type expression, ``unknown`` at worst.

    Example::

        infer_type("$this->tags->map(fn ($t) => new TagResource($t))")
        # "Array<TagResource>"
    """
    naming = naming or ResourceNaming()
    for rule in EXPRESSION_RULES:
        resolved = rule.apply(expression, naming)
        if resolved is not None:
            return resolved

    if companion_type:
        return companion_type
    return UNKNOWN


def is_optional_expression(expression: str) -> bool:
    """Return ``True`` for conditional attributes (``when(``, ``whenLoaded(`` and friends)."""
    return _OPTIONAL_RE.search(expression) is not None
