"""Exception hierarchy for ruletype.

All exceptions inherit from :class:`RuletypeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ruletype.exit_codes`.
The top-level error handler in :func:`ruletype.app.main` catches
``RuletypeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The inference modules (:mod:`ruletype.rules`, :mod:`ruletype.response`)
never raise these: a component that cannot infer something returns ``None``
and the caller degrades to ``unknown``. Exceptions are reserved for the
configuration and I/O boundary.

Subclass hierarchy::

    RuletypeError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SourceParseError    (exit 7)
    +-- OutputDriftError    (exit 8)
    +-- ConfigError         (exit 1)
"""

from ruletype.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OUTPUT_DRIFT,
    EXIT_SOURCE_PARSE_ERROR,
)


class RuletypeError(Exception):
    """Base exception for all ruletype errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ruletype.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RuletypeError):
    """Raised for invalid CLI arguments or an unknown declaration name."""

    exit_code = EXIT_INVALID_USAGE


class SourceParseError(RuletypeError):
    """Raised when a manifest cannot be loaded or a source directory does not exist."""

    exit_code = EXIT_SOURCE_PARSE_ERROR


class OutputDriftError(RuletypeError):
    """Raised by ``generate --check`` when the declaration file is stale."""

    exit_code = EXIT_OUTPUT_DRIFT


class ConfigError(RuletypeError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
