"""Canonical Pydantic models shared across all ruletype modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory
or the project-local ``ruletype.json``:
    :class:`OutputConfig`, :class:`GeneratorConfig`, and :class:`GlobalConfig`.

**Project models** -- produced by the source scanner or the manifest loader
and consumed by the generation pipeline:
    :class:`RequestDeclaration`, :class:`ResourceDeclaration`,
    :class:`CollectionDeclaration`, :class:`DataDeclaration`,
    :class:`EnumDeclaration`, and :class:`Project`.

**Inference output** -- produced once per generation pass:
    :class:`InferredField`, :class:`TypeDeclaration`, and the plain
    :class:`MissingSymbols` set.
"""

from __future__ import annotations

import enum
from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GeneratorConfig(BaseModel):
    """Settings that control one generation pass.

    Stored under ``generator`` in the global config and at the top level of
    the project-local ``ruletype.json``. See
    :func:`~ruletype.config.resolve_config` for the precedence chain.
    """

    source_dir: Optional[str] = Field(
        default=None, description="Root of the PHP source tree to scan"
    )
    include: list[str] = Field(
        default_factory=lambda: ["**/*.php"],
        description="Gitignore-style patterns of files to scan",
    )
    exclude: list[str] = Field(
        default_factory=lambda: [
            "**/vendor/**",
            "**/node_modules/**",
            "**/storage/**",
            "**/tests/**",
        ],
        description="Gitignore-style patterns of files to skip",
    )
    manifest: Optional[str] = Field(
        default=None, description="JSON/YAML manifest path or URL merged over scanned declarations"
    )
    output: str = Field(
        default="resources/types/generated.d.ts",
        description="Path of the generated declaration file",
    )
    null_as_optional: bool = Field(
        default=False,
        description="Render nullable companion types as optional instead of '| null'",
    )
    native_enums: bool = Field(
        default=False, description="Emit 'export enum' instead of literal unions"
    )
    resource_suffix: str = "Resource"
    collection_suffix: str = "Collection"
    data_suffix: str = "Data"
    generic_resource_types: list[str] = Field(
        default_factory=lambda: ["JsonResource"],
        description="Base resource classes whose collections have no known item type",
    )
    emit_response_aliases: bool = Field(
        default=True,
        description="Emit '<Name>Response = ApiResponse<Name>' for resources and collections",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/ruletype/config.json``.

    Fields here have the lowest precedence and can be overridden by the
    project config, environment variables, or CLI flags.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)


# --- Project declarations ---


class DeclarationKind(str, enum.Enum):
    """Kinds of source declarations ruletype knows how to translate."""

    REQUEST = "request"
    RESOURCE = "resource"
    COLLECTION = "collection"
    DATA = "data"
    ENUM = "enum"


class RequestDeclaration(BaseModel):
    """A validation rule set (a form request) to translate into a field list.

    ``rules`` maps dot-path field names to rule specifications: strings,
    nested lists, or rule objects from :mod:`ruletype.rules.objects`.
    ``properties`` holds companion types declared next to the rules (PHP
    ``@property`` docblock types), keyed by field name.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    rules: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, str] = Field(default_factory=dict)
    source_file: Optional[str] = None


class ResourceDeclaration(BaseModel):
    """A response builder whose returned array literal becomes a field list.

    ``source`` is the text of the response-building function (e.g. a JSON
    resource's ``toArray`` method). ``mixin`` is the model named by a
    ``@mixin`` docblock tag and ``data`` an explicit companion data-object
    name; either selects the companion types used as a fallback.
    """

    name: str
    source: str = ""
    mixin: Optional[str] = None
    data: Optional[str] = None
    source_file: Optional[str] = None


class CollectionDeclaration(BaseModel):
    """A resource collection, rendered as a plain or paginated array."""

    name: str
    collects: Optional[str] = Field(
        default=None, description="Resource class collected by this collection"
    )
    source_file: Optional[str] = None


class DataDeclaration(BaseModel):
    """A data-transfer object whose typed properties are companion types."""

    name: str
    properties: dict[str, str] = Field(
        default_factory=dict, description="Property name to PHP type string"
    )
    source_file: Optional[str] = None


class EnumDeclaration(BaseModel):
    """An enum with ordered ``label -> value`` cases."""

    name: str
    cases: dict[str, Union[int, str]] = Field(default_factory=dict)
    source_file: Optional[str] = None


class Project(BaseModel):
    """Every declaration discovered in a source tree and/or manifest.

    Each mapping is keyed by short class name. Produced by
    :meth:`~ruletype.parser.scanner.SourceScanner.scan` and
    :func:`~ruletype.parser.loader.load_manifest`, combined with
    :meth:`merge`.
    """

    requests: dict[str, RequestDeclaration] = Field(default_factory=dict)
    resources: dict[str, ResourceDeclaration] = Field(default_factory=dict)
    collections: dict[str, CollectionDeclaration] = Field(default_factory=dict)
    data: dict[str, DataDeclaration] = Field(default_factory=dict)
    enums: dict[str, EnumDeclaration] = Field(default_factory=dict)

    def merge(self, other: Project) -> Project:
        """Return a new project where *other*'s declarations replace same-named ones."""
        return Project(
            requests={**self.requests, **other.requests},
            resources={**self.resources, **other.resources},
            collections={**self.collections, **other.collections},
            data={**self.data, **other.data},
            enums={**self.enums, **other.enums},
        )

    def declaration_count(self) -> int:
        return (
            len(self.requests)
            + len(self.resources)
            + len(self.collections)
            + len(self.data)
            + len(self.enums)
        )


# --- Inference output ---


class InferredField(BaseModel):
    """One typed field of a generated declaration.

    ``type`` is a TypeScript type expression (primitive, literal union,
    ``Array<...>``, or a named reference).
    """

    name: str
    type: str = "unknown"
    optional: bool = False


class TypeDeclaration(BaseModel):
    """A rendered-ready declaration produced by the generation pipeline.

    ``body`` is the right-hand side of ``export type Name = ...`` for
    non-object declarations: the literal union of an enum, or the plain
    ``Array<Item>`` form of a collection (the emitter adds the paginated
    alternative). Object declarations carry ``fields`` instead.
    """

    name: str
    kind: DeclarationKind
    fields: list[InferredField] = Field(default_factory=list)
    body: Optional[str] = None
    enum_cases: dict[str, Union[int, str]] = Field(default_factory=dict)
    response_alias: bool = False


class MissingSymbols:
    """Named type references discovered during inference.

    The emission step must make sure every symbol resolves, either by
    declaring it in the same file or by reporting it as unresolved. Entries
    are deduplicated by fully-qualified name and iterate in sorted order so
    that output stays deterministic.
    """

    def __init__(self) -> None:
        self._symbols: dict[str, str] = {}

    def add(self, reference: str) -> str:
        """Record *reference* and return its short (unqualified) name."""
        fqcn = reference.strip().lstrip("\\")
        short = fqcn.rsplit("\\", 1)[-1]
        if fqcn:
            self._symbols.setdefault(fqcn, short)
        return short

    def update(self, other: MissingSymbols) -> None:
        for fqcn, short in other._symbols.items():
            self._symbols.setdefault(fqcn, short)

    def short_names(self) -> list[str]:
        return sorted(set(self._symbols.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._symbols or name in self._symbols.values()

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._symbols))

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"MissingSymbols({sorted(self._symbols)!r})"
