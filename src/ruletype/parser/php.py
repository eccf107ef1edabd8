"""Lightweight, regex-driven reading of PHP source text.

ruletype never executes or fully parses PHP. This module recognises the
handful of shapes it needs from a class file:

* the ``namespace`` and top-level ``use`` imports, used to qualify names;
* class and enum declarations with their parent, docblock and body;
* ``@property`` and ``@mixin`` docblock tags;
* typed public properties, including promoted constructor parameters;
* method bodies, found by brace matching;
* enum cases (native ``case`` lines and Spatie ``values()`` arrays);
* rule literals returned by a ``rules()`` method.

Brace and bracket matching skips quoted strings and comments, so a
``'}'`` in a validation message does not end a method early. Everything
here returns ``None`` or an empty container when a shape is not found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ruletype.response.extractor import (
    extract_returned_structure,
    find_matching,
    segment_entries,
    split_top_level_commas,
)
from ruletype.rules.objects import (
    EnumRule,
    EnumValueRule,
    InRule,
    OpaqueRule,
    StringableRule,
)

_NAMESPACE_RE = re.compile(r"^\s*namespace\s+([A-Za-z0-9_\\]+)\s*[;{]", re.MULTILINE)
_USE_RE = re.compile(r"^use\s+(?!function\s|const\s)([^;]+);", re.MULTILINE)
_DECLARATION_RE = re.compile(
    r"^[ \t]*((?:(?:abstract|final|readonly)\s+)*)"
    r"(class|enum|interface|trait)\s+([A-Za-z_][A-Za-z0-9_]*)"
    r"(?:\s*:\s*(int|string))?"
    r"(?:\s+extends\s+([A-Za-z0-9_\\]+))?"
    r"(?:\s+implements\s+[A-Za-z0-9_\\,\s]+?)?\s*\{",
    re.MULTILINE,
)
_PROPERTY_TAG_RE = re.compile(
    r"@property(?:-read|-write)?\s+(.+?)\s+\$([A-Za-z_][A-Za-z0-9_]*)"
)
_MIXIN_TAG_RE = re.compile(r"@mixin\s+([A-Za-z0-9_\\]+)")
_METHOD_TAG_RE = re.compile(
    r"@method\s+static\s+(?:self|static)\s+([A-Za-z_][A-Za-z0-9_]*)\s*\("
)
_TYPED_PROPERTY_RE = re.compile(
    r"(?:/\*\*\s*@var\s+(?P<doc>[^*]+?)\s*\*/\s*)?"
    r"\bpublic\s+(?:readonly\s+)?(?P<type>\??[A-Za-z0-9_\\|]+)\s+\$(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
)
_ENUM_CASE_RE = re.compile(
    r"^\s*case\s+([A-Za-z_][A-Za-z0-9_]*)\s*(?:=\s*([^;]+))?;", re.MULTILINE
)
_COLLECTS_RE = re.compile(
    r"\$collects\s*=\s*(?:([A-Za-z0-9_\\]+)::class|'([^']+)'|\"([^\"]+)\")\s*;"
)
_CLASS_CONSTANT_RE = re.compile(r"^\s*([A-Za-z0-9_\\]+)::class\s*$")
_NEW_RULE_RE = re.compile(
    r"^new\s+([A-Za-z0-9_\\]+)\s*\(\s*([A-Za-z0-9_\\]+)::class\s*\)\s*$"
)
_RULE_FACADE_RE = re.compile(
    r"^\\?(?:Illuminate\\Validation\\)?Rule::([A-Za-z_][A-Za-z0-9_]*)\s*\("
)
_NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?$")
_IDENTIFIER_IN_TYPE_RE = re.compile(
    r"(?<![\w$\\-])\\?[A-Za-z_][A-Za-z0-9_-]*(?:\\[A-Za-z_][A-Za-z0-9_]*)*"
)

# Type keywords that must never be qualified with a namespace.
BUILTIN_TYPES = frozenset({
    "int", "integer", "float", "double", "string", "bool", "boolean", "true",
    "false", "null", "void", "mixed", "object", "array", "iterable", "list",
    "callable", "self", "static", "parent", "never", "resource", "numeric",
    "scalar", "class-string", "non-empty-string", "positive-int",
    "negative-int", "non-empty-array", "non-empty-list",
})


@dataclass
class PhpClass:
    """A class-like declaration found in a PHP file.

    Attributes:
        name: Short class name.
        kind: ``class``, ``enum``, ``interface`` or ``trait``.
        namespace: Declaring namespace, empty for the global namespace.
        parent: Fully-qualified parent class, or ``None``.
        docblock: The ``/** ... */`` comment directly above the declaration.
        body: Source between the class's outer braces.
        abstract: Whether the class is declared ``abstract``.
        uses: Import alias to fully-qualified name.
    """

    name: str
    kind: str = "class"
    namespace: str = ""
    parent: Optional[str] = None
    docblock: str = ""
    body: str = ""
    abstract: bool = False
    uses: dict[str, str] = field(default_factory=dict)

    @property
    def fqcn(self) -> str:
        return f"{self.namespace}\\{self.name}" if self.namespace else self.name

    def resolve(self, name: str) -> str:
        return resolve_name(name, self.namespace, self.uses)


# --- Names ---


def parse_namespace(source: str) -> str:
    match = _NAMESPACE_RE.search(source)
    return match.group(1) if match else ""


def parse_uses(source: str) -> dict[str, str]:
    """Map import aliases to fully-qualified names.

    Handles ``use A\\B;``, ``use A\\B as C;``, comma lists and group
    imports (``use A\\{B, C as D};``). Indented ``use`` lines (trait uses
    inside a class body) are ignored.
    """
    uses: dict[str, str] = {}
    for match in _USE_RE.finditer(source):
        clause = match.group(1).strip()
        if "{" in clause:
            prefix, _, group = clause.partition("{")
            prefix = prefix.strip().rstrip("\\")
            names = [f"{prefix}\\{item.strip()}" for item in group.rstrip("}").split(",")]
        else:
            names = [item.strip() for item in clause.split(",")]

        for name in names:
            if not name or name.endswith("\\"):
                continue
            parts = re.split(r"\s+as\s+", name, maxsplit=1)
            target = parts[0]
            alias = parts[1] if len(parts) > 1 else ""
            target = target.strip().lstrip("\\")
            alias = alias.strip() or target.rsplit("\\", 1)[-1]
            uses[alias] = target
    return uses


def resolve_name(name: str, namespace: str, uses: dict[str, str]) -> str:
    """Qualify a class reference the way PHP resolves it at compile time.

    Example::

        resolve_name("UserRole", "App\\\\Http", {"UserRole": "App\\\\Enums\\\\UserRole"})
        # "App\\Enums\\UserRole"
    """
    name = name.strip()
    if name.startswith("\\"):
        return name[1:]

    head, sep, rest = name.partition("\\")
    if head in uses:
        return uses[head] + (sep + rest if sep else "")
    if name.lower() in BUILTIN_TYPES:
        return name
    return f"{namespace}\\{name}" if namespace else name


def qualify_type(type_expr: str, namespace: str, uses: dict[str, str]) -> str:
    """Rewrite class names in a PHP/docblock type as ``\\Fully\\Qualified`` names.

    Builtin type keywords are left alone, so ``?Carbon|array<int, Tag>``
    becomes ``?\\Illuminate\\Support\\Carbon|array<int, \\App\\Models\\Tag>``.
    """

    def _qualify(match: re.Match[str]) -> str:
        name = match.group(0)
        if name.lower() in BUILTIN_TYPES:
            return name
        return "\\" + resolve_name(name, namespace, uses)

    return _IDENTIFIER_IN_TYPE_RE.sub(_qualify, type_expr)


# --- Declarations ---


def _docblock_before(source: str, start: int) -> str:
    prefix = source[:start].rstrip()
    # Attributes such as #[TypeScript] may sit between docblock and class.
    while prefix.endswith("]"):
        attr_start = prefix.rfind("#[")
        if attr_start == -1:
            break
        prefix = prefix[:attr_start].rstrip()

    if not prefix.endswith("*/"):
        return ""
    doc_start = prefix.rfind("/**")
    return prefix[doc_start:] if doc_start != -1 else ""


def parse_classes(source: str) -> list[PhpClass]:
    """Return every class-like declaration in *source*, in file order.

    Declarations whose braces never balance are skipped.
    """
    namespace = parse_namespace(source)
    uses = parse_uses(source)
    classes: list[PhpClass] = []

    for match in _DECLARATION_RE.finditer(source):
        open_index = match.end() - 1
        close_index = find_matching(source, open_index)
        if close_index is None:
            continue

        modifiers, kind, name, _, parent = match.groups()
        classes.append(
            PhpClass(
                name=name,
                kind=kind,
                namespace=namespace,
                parent=resolve_name(parent, namespace, uses) if parent else None,
                docblock=_docblock_before(source, match.start()),
                body=source[open_index + 1:close_index],
                abstract="abstract" in modifiers.split(),
                uses=uses,
            )
        )
    return classes


def parse_property_tags(docblock: str) -> dict[str, str]:
    """Read ``@property``/``@property-read``/``@property-write`` tags.

    Returns:
        Property name (without ``$``) to its raw PHP type, in tag order.
    """
    return {name: type_expr.strip() for type_expr, name in _PROPERTY_TAG_RE.findall(docblock)}


def parse_mixin(docblock: str) -> Optional[str]:
    """Return the class named by the first ``@mixin`` tag, if any."""
    match = _MIXIN_TAG_RE.search(docblock)
    return match.group(1) if match else None


def parse_typed_properties(body: str) -> dict[str, str]:
    """Read typed public properties and promoted constructor parameters.

    A ``/** @var T */`` comment directly before the property replaces the
    native type, which is how element types of arrays are usually declared.
    """
    properties: dict[str, str] = {}
    for match in _TYPED_PROPERTY_RE.finditer(body):
        properties[match.group("name")] = (match.group("doc") or match.group("type")).strip()
    return properties


def extract_method_source(body: str, name: str) -> Optional[str]:
    """Return the source of method *name*, from ``function`` to its closing brace.

    Abstract and interface methods (no body) yield ``None``.
    """
    match = re.search(r"\bfunction\s+&?" + re.escape(name) + r"\s*\(", body)
    if match is None:
        return None

    params_close = find_matching(body, match.end() - 1)
    if params_close is None:
        return None

    index = params_close + 1
    while index < len(body) and body[index] not in "{;":
        index += 1
    if index >= len(body) or body[index] == ";":
        return None

    close_index = find_matching(body, index)
    if close_index is None:
        return None
    return body[match.start():close_index + 1]


def parse_collects(body: str, php_class: PhpClass) -> Optional[str]:
    """Return the fully-qualified class named by a ``$collects`` default."""
    match = _COLLECTS_RE.search(body)
    if match is None:
        return None
    if match.group(1):
        return php_class.resolve(match.group(1))
    return (match.group(2) or match.group(3)).replace("\\\\", "\\").lstrip("\\")


# --- Literals ---


def parse_scalar(expression: str) -> tuple[bool, Union[str, int, float, bool, None]]:
    """Parse a PHP scalar literal.

    Returns:
        ``(True, value)`` for quoted strings, numbers, booleans and
        ``null``; ``(False, None)`` for anything else.
    """
    text = expression.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        inner = text[1:-1]
        if text[0] == "'":
            return True, inner.replace("\\'", "'").replace("\\\\", "\\")
        return True, inner.replace('\\"', '"').replace("\\\\", "\\")
    if _NUMBER_RE.match(text):
        return True, float(text) if "." in text else int(text)

    lowered = text.lower()
    if lowered in ("true", "false"):
        return True, lowered == "true"
    if lowered == "null":
        return True, None
    return False, None


def parse_enum_cases(php_class: PhpClass) -> dict[str, Union[int, str]]:
    """Return ``label -> value`` for a native or Spatie enum.

    Native enums read their ``case`` lines; pure (unbacked) cases use the
    label as the value. Spatie enums read the array returned by
    ``values()`` and fall back to ``@method static self Label()`` tags.
    """
    cases: dict[str, Union[int, str]] = {}

    if php_class.kind == "enum":
        for label, raw in _ENUM_CASE_RE.findall(php_class.body):
            ok, value = parse_scalar(raw) if raw else (False, None)
            cases[label] = value if ok and isinstance(value, (int, str)) else label
        return cases

    labels = _METHOD_TAG_RE.findall(php_class.docblock)
    values_source = extract_method_source(php_class.body, "values")
    structure = extract_returned_structure(values_source) if values_source else None
    if structure is not None:
        for key, raw in segment_entries(structure).items():
            ok, value = parse_scalar(raw)
            cases[key] = value if ok and isinstance(value, (int, str)) else key

    for label in labels:
        cases.setdefault(label, label)
    return cases


def parse_rules(method_source: str, php_class: PhpClass) -> dict[str, Any]:
    """Translate the array returned by a ``rules()`` method into a rule mapping.

    Each value becomes a rule string, a list of rule specs, or a rule
    object; see :func:`parse_rule_literal`.
    """
    structure = extract_returned_structure(method_source)
    if structure is None:
        return {}
    return {
        key: parse_rule_literal(expression, php_class)
        for key, expression in segment_entries(structure).items()
    }


def parse_rule_literal(expression: str, php_class: PhpClass) -> Any:
    """Translate one PHP rule expression.

    Recognised forms:

    * ``'required|string'`` -- the string itself;
    * ``[...]`` -- a list, each element translated recursively;
    * ``new Enum(X::class)`` / ``Rule::enum(X::class)`` --
      :class:`~ruletype.rules.objects.EnumRule`;
    * ``new EnumRule(X::class)`` (Spatie) --
      :class:`~ruletype.rules.objects.EnumValueRule`;
    * ``Rule::in([...])`` -- :class:`~ruletype.rules.objects.InRule`;
    * other ``Rule::name(...)`` calls -- a
      :class:`~ruletype.rules.objects.StringableRule` with the scalar
      arguments as parameters.

    Anything else becomes an :class:`~ruletype.rules.objects.OpaqueRule`.
    """
    text = expression.strip()

    ok, value = parse_scalar(text)
    if ok:
        return value if isinstance(value, str) else OpaqueRule(text)

    if text.startswith("[") and find_matching(text, 0) == len(text) - 1:
        return [
            parse_rule_literal(item, php_class)
            for item in split_top_level_commas(text[1:-1])
            if item.strip()
        ]

    new_rule = _NEW_RULE_RE.match(text)
    if new_rule is not None:
        rule_class = php_class.resolve(new_rule.group(1)).rsplit("\\", 1)[-1]
        target = php_class.resolve(new_rule.group(2))
        if rule_class == "Enum":
            return EnumRule(target)
        if rule_class == "EnumRule":
            return EnumValueRule(target)
        return OpaqueRule(text)

    facade = _RULE_FACADE_RE.match(text)
    if facade is not None:
        close_index = find_matching(text, facade.end() - 1)
        if close_index is None:
            return OpaqueRule(text)
        arguments = text[facade.end():close_index]
        return _facade_rule(facade.group(1), arguments, php_class, text)

    return OpaqueRule(text)


def _facade_rule(method: str, arguments: str, php_class: PhpClass, source: str) -> object:
    args = [arg.strip() for arg in split_top_level_commas(arguments) if arg.strip()]

    if method == "enum" and args:
        constant = _CLASS_CONSTANT_RE.match(args[0])
        if constant is not None:
            return EnumRule(php_class.resolve(constant.group(1)))
        return OpaqueRule(source)

    if method in ("in", "notIn") and args:
        raw_values = args
        if len(args) == 1 and args[0].startswith("["):
            raw_values = split_top_level_commas(args[0][1:-1])
        values = []
        for raw in raw_values:
            ok, value = parse_scalar(raw)
            if not ok:
                return OpaqueRule(source)
            values.append(_scalar_text(value))
        if method == "notIn":
            return StringableRule("not_in", tuple(values))
        return InRule(tuple(values))

    parameters = []
    for raw in args:
        ok, value = parse_scalar(raw)
        if ok:
            parameters.append(_scalar_text(value))
    return StringableRule(_snake(method), tuple(parameters))


def _scalar_text(value: Union[str, int, float, bool, None]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
