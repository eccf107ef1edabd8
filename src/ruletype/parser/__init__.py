"""Readers that turn PHP sources and manifests into a :class:`~ruletype.models.Project`.

* :mod:`~ruletype.parser.php` -- regex-driven reading of PHP class files.
* :mod:`~ruletype.parser.companion` -- PHP/docblock type translation.
* :mod:`~ruletype.parser.scanner` -- walk a source tree and classify classes.
* :mod:`~ruletype.parser.loader` -- JSON/YAML manifests from file, URL or stdin.
* :mod:`~ruletype.parser.project` -- combine both as configured.
"""

from ruletype.parser.companion import php_type_to_ts
from ruletype.parser.loader import load_manifest
from ruletype.parser.project import load_project
from ruletype.parser.scanner import SourceScanner

__all__ = ["SourceScanner", "load_manifest", "load_project", "php_type_to_ts"]
