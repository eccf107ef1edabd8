"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ruletype.exceptions.RuletypeError` subclass.
CI scripts can inspect the exit code to tell a stale generated file apart
from a broken configuration without parsing stderr.

Example::

    $ ruletype generate --check
    $ echo $?
    8   # EXIT_OUTPUT_DRIFT -- the declaration file is out of date
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SOURCE_PARSE_ERROR = 7
"""A manifest or source tree could not be loaded."""

EXIT_OUTPUT_DRIFT = 8
"""``generate --check`` found that the declaration file differs from the generated text."""
