"""Built-in CLI sub-commands for ruletype.

* :mod:`~ruletype.commands.init` -- write a project-local ``ruletype.json``.
* :mod:`~ruletype.commands.generate` -- scan, infer and write the ``.d.ts`` file.
* :mod:`~ruletype.commands.inspect` -- show inferred fields and referenced
  symbols without writing anything.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect``) or a plain callback function
registered directly on the root app (for single commands like ``init``).
"""
