"""Source scanner that discovers translatable declarations in a PHP tree.

Walks PHP files, reads their class declarations with
:mod:`ruletype.parser.php`, and classifies each class by what it extends:

* form requests (``FormRequest``) become
  :class:`~ruletype.models.RequestDeclaration` objects;
* JSON resources (``JsonResource``) become
  :class:`~ruletype.models.ResourceDeclaration` objects;
* resource collections (``ResourceCollection``) become
  :class:`~ruletype.models.CollectionDeclaration` objects;
* Spatie data objects (``Data``) become
  :class:`~ruletype.models.DataDeclaration` objects;
* Spatie enums and native ``enum`` declarations become
  :class:`~ruletype.models.EnumDeclaration` objects.

Inheritance is followed through every scanned class, so a ``UserResource``
extending an application-level ``BaseResource`` is still a resource.

See :class:`SourceScanner` for the main entry point.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import pathspec

from ruletype.models import (
    CollectionDeclaration,
    DataDeclaration,
    DeclarationKind,
    EnumDeclaration,
    Project,
    RequestDeclaration,
    ResourceDeclaration,
)
from ruletype.parser.php import (
    PhpClass,
    extract_method_source,
    parse_classes,
    parse_collects,
    parse_enum_cases,
    parse_mixin,
    parse_property_tags,
    parse_rules,
    parse_typed_properties,
    qualify_type,
)

logger = logging.getLogger(__name__)

# Framework base classes, most specific first: a ResourceCollection is
# itself a JsonResource.
BASE_CLASSES: list[tuple[str, DeclarationKind]] = [
    ("Illuminate\\Foundation\\Http\\FormRequest", DeclarationKind.REQUEST),
    ("Illuminate\\Http\\Resources\\Json\\ResourceCollection", DeclarationKind.COLLECTION),
    ("Illuminate\\Http\\Resources\\Json\\AnonymousResourceCollection", DeclarationKind.COLLECTION),
    ("Illuminate\\Http\\Resources\\Json\\JsonResource", DeclarationKind.RESOURCE),
    ("Spatie\\Enum\\Enum", DeclarationKind.ENUM),
    ("Spatie\\Enum\\Laravel\\Enum", DeclarationKind.ENUM),
    ("Spatie\\LaravelData\\Data", DeclarationKind.DATA),
    ("Spatie\\LaravelData\\Dto", DeclarationKind.DATA),
]

_BY_FQCN = dict(BASE_CLASSES)
# Parents that could not be resolved (missing import) still match by short name.
_BY_SHORT_NAME = {fqcn.rsplit("\\", 1)[-1]: kind for fqcn, kind in BASE_CLASSES}

_ALWAYS_SKIP = {".git", ".idea", ".vscode", "vendor", "node_modules", "storage", "bootstrap"}


def _load_gitignore(root: Path) -> pathspec.PathSpec | None:
    """Load ``.gitignore`` from *root* if it exists, returning a PathSpec matcher.

    Args:
        root: Directory in which to look for a ``.gitignore`` file.

    Returns:
        A :class:`pathspec.PathSpec` compiled from the gitignore rules,
        or ``None`` if no ``.gitignore`` file is present.
    """
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return None
    lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    return pathspec.PathSpec.from_lines("gitignore", lines)


class SourceScanner:
    """Scan PHP source files for requests, resources, data objects and enums.

    The scan happens in two passes. The first reads every class in every
    matching file; the second classifies each class by walking its parent
    chain through the classes read in the first pass, then extracts the
    declaration for its kind. Abstract classes are never emitted.
    """

    def __init__(self) -> None:
        self._classes: dict[str, tuple[PhpClass, str]] = {}

    def discover_files(
        self,
        source_dir: str,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
    ) -> list[Path]:
        """Return the PHP files under *source_dir* that the scan would read.

        Discovers files using gitignore-compatible pattern matching (via
        :mod:`pathspec`), respecting ``.gitignore`` rules at the source root.
        Directories like ``vendor``, ``node_modules`` and ``.git`` are always
        pruned.

        Args:
            source_dir: Root directory to scan.
            include_patterns: Glob patterns to include. Defaults to
                ``["**/*.php"]``.
            exclude_patterns: Glob patterns to exclude (e.g.
                ``["**/tests/**"]``).

        Returns:
            Matching file paths, sorted.
        """
        root = Path(source_dir)
        if not root.is_dir():
            return []

        include = include_patterns or ["**/*.php"]
        exclude = exclude_patterns or []

        include_spec = pathspec.PathSpec.from_lines("gitignore", include)
        exclude_spec = pathspec.PathSpec.from_lines("gitignore", exclude) if exclude else None
        gitignore_spec = _load_gitignore(root)

        php_files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(str(root)):
            rel_dir = os.path.relpath(dirpath, str(root))

            dirnames[:] = [
                d for d in dirnames
                if d not in _ALWAYS_SKIP
                and not (gitignore_spec and gitignore_spec.match_file(
                    (os.path.join(rel_dir, d) if rel_dir != "." else d) + "/",
                ))
            ]

            for fname in filenames:
                if not fname.endswith(".php"):
                    continue
                rel_path = os.path.join(rel_dir, fname) if rel_dir != "." else fname
                if gitignore_spec and gitignore_spec.match_file(rel_path):
                    continue
                if not include_spec.match_file(rel_path):
                    continue
                if exclude_spec and exclude_spec.match_file(rel_path):
                    continue
                php_files.append(Path(dirpath) / fname)

        return sorted(php_files)

    def scan(
        self,
        source_dir: str,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
    ) -> Project:
        """Walk *source_dir* and collect every translatable declaration.

        Files that cannot be read or decoded are logged and skipped.

        Args:
            source_dir: Root directory to scan.
            include_patterns: Glob patterns to include.
            exclude_patterns: Glob patterns to exclude.

        Returns:
            A :class:`~ruletype.models.Project` keyed by short class name.
        """
        self._classes = {}
        for path in self.discover_files(source_dir, include_patterns, exclude_patterns):
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)
                continue

            for php_class in parse_classes(source):
                self._classes[php_class.fqcn] = (php_class, str(path))

        project = Project()
        for fqcn in sorted(self._classes):
            php_class, source_file = self._classes[fqcn]
            kind = self.classify(php_class)
            if kind is None or php_class.abstract:
                continue
            self._collect(project, kind, php_class, source_file)

        logger.debug(
            "Scanned %d classes, found %d declarations",
            len(self._classes),
            project.declaration_count(),
        )
        return project

    def classify(self, php_class: PhpClass) -> Optional[DeclarationKind]:
        """Return the declaration kind of *php_class*, or ``None``.

        Native ``enum`` declarations are enums regardless of parents.
        """
        if php_class.kind == "enum":
            return DeclarationKind.ENUM
        if php_class.kind != "class":
            return None

        seen: set[str] = set()
        parent = php_class.parent
        while parent and parent not in seen:
            seen.add(parent)
            if parent in _BY_FQCN:
                return _BY_FQCN[parent]

            scanned = self._classes.get(parent)
            if scanned is None:
                return _BY_SHORT_NAME.get(parent.rsplit("\\", 1)[-1])
            parent = scanned[0].parent
        return None

    def _ancestors(self, php_class: PhpClass) -> list[PhpClass]:
        """Return *php_class* followed by its scanned ancestors."""
        chain = [php_class]
        parent = php_class.parent
        while parent in self._classes and self._classes[parent][0] not in chain:
            chain.append(self._classes[parent][0])
            parent = self._classes[parent][0].parent
        return chain

    def _find_method(self, php_class: PhpClass, name: str) -> Optional[tuple[str, PhpClass]]:
        for owner in self._ancestors(php_class):
            source = extract_method_source(owner.body, name)
            if source is not None:
                return source, owner
        return None

    def _collect(
        self,
        project: Project,
        kind: DeclarationKind,
        php_class: PhpClass,
        source_file: str,
    ) -> None:
        name = php_class.name
        previous = _declared_in(project, name)
        if previous is not None:
            logger.warning(
                "Class name %s in %s collides with the one in %s; the later one wins",
                name,
                source_file,
                previous,
            )

        if kind is DeclarationKind.REQUEST:
            found = self._find_method(php_class, "rules")
            rules = parse_rules(*found) if found else {}
            properties = {
                field_name: qualify_type(type_expr, php_class.namespace, php_class.uses)
                for field_name, type_expr in parse_property_tags(php_class.docblock).items()
            }
            project.requests[name] = RequestDeclaration(
                name=name, rules=rules, properties=properties, source_file=source_file
            )

        elif kind is DeclarationKind.RESOURCE:
            found = self._find_method(php_class, "toArray")
            if found is None:
                logger.debug("Resource %s has no toArray method, skipping", name)
                return
            mixin = parse_mixin(php_class.docblock)
            project.resources[name] = ResourceDeclaration(
                name=name,
                source=found[0],
                mixin=php_class.resolve(mixin) if mixin else None,
                source_file=source_file,
            )

        elif kind is DeclarationKind.COLLECTION:
            collects = None
            for owner in self._ancestors(php_class):
                collects = parse_collects(owner.body, owner)
                if collects:
                    break
            project.collections[name] = CollectionDeclaration(
                name=name, collects=collects, source_file=source_file
            )

        elif kind is DeclarationKind.DATA:
            properties: dict[str, str] = {}
            for owner in reversed(self._ancestors(php_class)):
                for prop, type_expr in parse_typed_properties(owner.body).items():
                    properties[prop] = qualify_type(type_expr, owner.namespace, owner.uses)
            project.data[name] = DataDeclaration(
                name=name, properties=properties, source_file=source_file
            )

        elif kind is DeclarationKind.ENUM:
            project.enums[name] = EnumDeclaration(
                name=name, cases=parse_enum_cases(php_class), source_file=source_file
            )


def _declared_in(project: Project, name: str) -> Optional[str]:
    """Return the source file already declaring *name* in any of *project*'s maps."""
    for declarations in (
        project.requests,
        project.resources,
        project.collections,
        project.data,
        project.enums,
    ):
        if name in declarations:
            return declarations[name].source_file
    return None
