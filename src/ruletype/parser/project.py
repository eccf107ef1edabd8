"""Assemble the :class:`~ruletype.models.Project` described by a generator config."""

from __future__ import annotations

import logging
from pathlib import Path

from ruletype.exceptions import InvalidUsageError, SourceParseError
from ruletype.models import GeneratorConfig, Project
from ruletype.parser.loader import load_manifest
from ruletype.parser.scanner import SourceScanner

logger = logging.getLogger(__name__)


def load_project(config: GeneratorConfig) -> Project:
    """Scan ``config.source_dir`` and merge ``config.manifest`` over the result.

    Manifest declarations replace scanned ones with the same name.

    Raises:
        InvalidUsageError: If neither a source directory nor a manifest is
            configured.
        SourceParseError: If the source directory does not exist or the
            manifest cannot be loaded.
    """
    if not config.source_dir and not config.manifest:
        raise InvalidUsageError(
            "No source directory or manifest configured. "
            "Pass --source-dir or run: ruletype init"
        )

    project = Project()
    if config.source_dir:
        root = Path(config.source_dir)
        if not root.is_dir():
            raise SourceParseError(f"Source directory not found: {config.source_dir}")
        project = SourceScanner().scan(str(root), config.include, config.exclude)
        logger.debug("Scanned %s: %d declarations", root, project.declaration_count())

    if config.manifest:
        project = project.merge(load_manifest(config.manifest))

    return project
