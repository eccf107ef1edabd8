"""Declaration generation -- run inference over a project and render ``.d.ts`` text.

Typical usage::

    from ruletype.generator import generate, render, write_output
    from ruletype.parser import SourceScanner

    project = SourceScanner().scan("app")
    result = generate(project, config)
    write_output(render(result, config), Path(config.output))

Sub-modules:

* :mod:`~ruletype.generator.pipeline` -- per-declaration inference and the
  :class:`~ruletype.generator.pipeline.GenerationResult`.
* :mod:`~ruletype.generator.emitter` -- deterministic rendering and
  change-aware atomic writes.
"""

from ruletype.generator.emitter import render, write_output
from ruletype.generator.pipeline import GenerationResult, generate

__all__ = ["GenerationResult", "generate", "render", "write_output"]
