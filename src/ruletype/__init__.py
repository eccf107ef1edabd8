"""ruletype -- derive TypeScript declarations from validation rules and response shapes.

This package reads request-validation rule sets and response-building source
code (PHP form requests and JSON resources, or an equivalent JSON/YAML
manifest) and synthesizes a single ``.d.ts`` file of typed declarations for a
frontend codebase. Nothing is executed: rules are inspected as data and
response builders are read as text.

Typical workflow::

    ruletype init --source-dir app      # write ./ruletype.json
    ruletype generate                   # write resources/types/generated.d.ts
    ruletype generate --check           # fail in CI when the file is stale

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    typescript: Helpers for manipulating TypeScript type expressions.
"""

__version__ = "0.3.0"
