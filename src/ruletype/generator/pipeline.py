"""Run rule and response inference over every declaration of a project.

:func:`generate` is the single entry point. It turns a
:class:`~ruletype.models.Project` into a :class:`GenerationResult` holding
one :class:`~ruletype.models.TypeDeclaration` per translatable class,
sorted by name, plus the set of type names those declarations reference.

**Companion types**

* Requests use their ``@property`` docblock types.
* Resources use the typed properties of a data object, chosen by the
  explicit ``data`` name, else ``@mixin User`` -> ``UserData``, else the
  resource name (``UserResource`` -> ``UserData``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ruletype.models import (
    CollectionDeclaration,
    DataDeclaration,
    DeclarationKind,
    EnumDeclaration,
    GeneratorConfig,
    InferredField,
    MissingSymbols,
    Project,
    RequestDeclaration,
    ResourceDeclaration,
    TypeDeclaration,
)
from ruletype.parser.companion import is_nullable_type, php_type_to_ts
from ruletype.response import ResourceNaming, infer_response_fields
from ruletype.rules import synthesize_fields
from ruletype.typescript import (
    UNKNOWN,
    array_of,
    join_union,
    quote_literal,
    referenced_types,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Output of one generation pass.

    Attributes:
        declarations: Generated declarations, sorted by name.
        missing_symbols: Every named type referenced by a declaration.
        skipped: Names of requests and resources that produced no fields
            (no rules, or no non-empty returned array literal).
    """

    declarations: list[TypeDeclaration] = field(default_factory=list)
    missing_symbols: MissingSymbols = field(default_factory=MissingSymbols)
    skipped: list[str] = field(default_factory=list)

    def get(self, name: str) -> Optional[TypeDeclaration]:
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None

    @property
    def declared_names(self) -> set[str]:
        return {declaration.name for declaration in self.declarations}

    @property
    def unresolved_symbols(self) -> list[str]:
        """Referenced type names with no declaration in this result, sorted."""
        declared = self.declared_names
        return [name for name in self.missing_symbols.short_names() if name not in declared]

    @property
    def uses_api_response(self) -> bool:
        return any(declaration.response_alias for declaration in self.declarations)


def generate(project: Project, config: Optional[GeneratorConfig] = None) -> GenerationResult:
    """Infer declarations for every request, resource, collection, data object and enum.

    Args:
        project: Declarations from the scanner and/or a manifest.
        config: Generator settings; defaults apply when omitted.

    Returns:
        The :class:`GenerationResult`. Identical inputs always produce an
        identical result.
    """
    config = config or GeneratorConfig()
    result = GenerationResult()
    declarations: list[TypeDeclaration] = []

    for request in project.requests.values():
        declaration = _request_declaration(request, config, result.missing_symbols)
        if declaration is None:
            result.skipped.append(request.name)
            continue
        declarations.append(declaration)

    naming = ResourceNaming.from_config(config)
    for resource in project.resources.values():
        declaration = _resource_declaration(resource, project, config, naming)
        if declaration is None:
            result.skipped.append(resource.name)
            continue
        declarations.append(declaration)

    for collection in project.collections.values():
        declarations.append(_collection_declaration(collection, config))

    for data in project.data.values():
        declarations.append(_data_declaration(data, config))

    for enum in project.enums.values():
        declarations.append(_enum_declaration(enum))

    declarations.sort(key=lambda declaration: declaration.name)
    for declaration in declarations:
        for type_expr in _declaration_types(declaration):
            for name in referenced_types(type_expr):
                result.missing_symbols.add(name)

    result.declarations = declarations
    logger.debug(
        "Generated %d declarations (%d skipped, %d unresolved)",
        len(declarations),
        len(result.skipped),
        len(result.unresolved_symbols),
    )
    return result


def _declaration_types(declaration: TypeDeclaration) -> list[str]:
    types = [declaration_field.type for declaration_field in declaration.fields]
    if declaration.body:
        types.append(declaration.body)
    return types


def request_companion_types(
    request: RequestDeclaration, config: GeneratorConfig
) -> dict[str, str]:
    """Translate a request's ``@property`` types into TypeScript."""
    scratch = MissingSymbols()
    return {
        name: php_type_to_ts(type_expr, scratch, null_as_optional=config.null_as_optional)
        for name, type_expr in request.properties.items()
    }


def _request_declaration(
    request: RequestDeclaration,
    config: GeneratorConfig,
    missing_symbols: MissingSymbols,
) -> Optional[TypeDeclaration]:
    fields = synthesize_fields(
        request.rules, request_companion_types(request, config), missing_symbols
    )
    if not fields:
        logger.debug("Skipping request %s: no rule fields", request.name)
        return None
    return TypeDeclaration(name=request.name, kind=DeclarationKind.REQUEST, fields=fields)


def companion_data_name(resource: ResourceDeclaration, config: GeneratorConfig) -> Optional[str]:
    """Name of the data object whose properties type *resource*'s fields."""
    if resource.data:
        return resource.data.rsplit("\\", 1)[-1]
    if resource.mixin:
        return resource.mixin.rsplit("\\", 1)[-1] + config.data_suffix
    if resource.name.endswith(config.resource_suffix) and resource.name != config.resource_suffix:
        return resource.name[: -len(config.resource_suffix)] + config.data_suffix
    return None


def resource_companion_types(
    resource: ResourceDeclaration, project: Project, config: GeneratorConfig
) -> dict[str, str]:
    """Translate the companion data object's typed properties, if it is known."""
    data_name = companion_data_name(resource, config)
    data = project.data.get(data_name) if data_name else None
    if data is None:
        return {}

    scratch = MissingSymbols()
    return {name: php_type_to_ts(type_expr, scratch) for name, type_expr in data.properties.items()}


def _resource_declaration(
    resource: ResourceDeclaration,
    project: Project,
    config: GeneratorConfig,
    naming: ResourceNaming,
) -> Optional[TypeDeclaration]:
    fields = infer_response_fields(
        resource.source, resource_companion_types(resource, project, config), naming
    )
    if not fields:
        logger.debug("Skipping resource %s: no returned fields", resource.name)
        return None
    return TypeDeclaration(
        name=resource.name,
        kind=DeclarationKind.RESOURCE,
        fields=fields,
        response_alias=config.emit_response_aliases,
    )


def collection_item_type(collection: CollectionDeclaration, config: GeneratorConfig) -> str:
    """Item type of a collection: its ``collects`` class, else ``XCollection`` -> ``XResource``."""
    if collection.collects:
        return collection.collects.rsplit("\\", 1)[-1]

    suffix = config.collection_suffix
    if collection.name.endswith(suffix) and collection.name != suffix:
        return collection.name[: -len(suffix)] + config.resource_suffix
    return UNKNOWN


def _collection_declaration(
    collection: CollectionDeclaration, config: GeneratorConfig
) -> TypeDeclaration:
    return TypeDeclaration(
        name=collection.name,
        kind=DeclarationKind.COLLECTION,
        body=array_of(collection_item_type(collection, config)),
        response_alias=config.emit_response_aliases,
    )


def _data_declaration(data: DataDeclaration, config: GeneratorConfig) -> TypeDeclaration:
    scratch = MissingSymbols()
    fields = [
        InferredField(
            name=name,
            type=php_type_to_ts(type_expr, scratch, null_as_optional=config.null_as_optional),
            optional=config.null_as_optional and is_nullable_type(type_expr),
        )
        for name, type_expr in data.properties.items()
    ]
    return TypeDeclaration(name=data.name, kind=DeclarationKind.DATA, fields=fields)


def _enum_declaration(enum: EnumDeclaration) -> TypeDeclaration:
    literals = [
        quote_literal(value) if isinstance(value, str) else str(value)
        for value in enum.cases.values()
    ]
    return TypeDeclaration(
        name=enum.name,
        kind=DeclarationKind.ENUM,
        body=join_union(literals) if literals else "never",
        enum_cases=dict(enum.cases),
    )
