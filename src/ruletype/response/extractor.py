"""Locate and segment the array literal returned by a response builder.

Response builders (a JSON resource's ``toArray`` method, for instance) end in
``return [ 'key' => expression, ... ];``. This module works purely on source
text:

* :func:`extract_returned_structure` finds the first ``return`` and the
  bracketed literal that follows it, and returns the text between the
  outermost brackets.
* :func:`segment_entries` splits that text on top-level commas into
  ``key => expression`` pairs, ignoring commas nested in brackets,
  parentheses, braces, or quoted strings. Comments are dropped.

Neither function raises. An unbalanced literal yields ``None`` rather than a
partial result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_RETURN_RE = re.compile(r"\breturn\b")
_QUOTED_KEY_RE = re.compile(r"""^(['"])(.+)\1$""", re.DOTALL)

_OPENERS = frozenset("[({")
_CLOSERS = frozenset("])}")


@dataclass
class ExpressionEntry:
    """One ``key => expression`` pair of a returned array literal."""

    key: str
    expression: str


def extract_returned_structure(source: str) -> Optional[str]:
    """Return the inner text of the array literal after the first ``return``.

    Brackets inside quoted strings and comments are ignored when matching
    the closing bracket.

    Args:
        source: Source text of the response-building function.

    Returns:
        The trimmed text between the literal's outer ``[`` and ``]``, or
        ``None`` when there is no ``return``, no ``[`` after it, or the
        brackets never balance.

    Example::

        extract_returned_structure("return ['id' => $this->id];")
        # "'id' => $this->id"
    """
    match = _RETURN_RE.search(source)
    if match is None:
        return None

    start = source.find("[", match.end())
    if start == -1:
        return None

    end = find_matching(source, start)
    if end is None:
        return None
    return source[start + 1:end].strip()


def segment_entries(content: str) -> dict[str, str]:
    """Split array-literal content into an ordered ``key -> expression`` mapping.

    Segments without ``=>`` are not key/value pairs and are skipped. Each
    segment is split on its first ``=>``; a quoted key loses its quotes and
    the expression is right-trimmed of commas and whitespace. A repeated key
    keeps its first position and takes the last expression.

    Example::

        segment_entries("'id' => $this->id, 'tags' => [1, 2],")
        # {"id": "$this->id", "tags": "[1, 2]"}
    """
    entries: dict[str, str] = {}
    for segment in split_top_level_commas(content):
        _append_entry(entries, segment)
    return entries


def parse_entries(content: str) -> list[ExpressionEntry]:
    """Like :func:`segment_entries` but returns :class:`ExpressionEntry` objects."""
    return [ExpressionEntry(key, expr) for key, expr in segment_entries(content).items()]


def split_top_level_commas(content: str) -> list[str]:
    """Split *content* on commas outside brackets, parentheses, braces and strings.

    Comments are dropped from the segments.
    """
    segments: list[str] = []
    current: list[str] = []
    depth = 0
    index = 0

    while index < len(content):
        ch = content[index]
        if ch in ("'", '"'):
            end = skip_string(content, index)
            current.append(content[index:end])
            index = end
            continue
        if ch in ("/", "#"):
            end = skip_comment(content, index)
            if end != index:
                current.append("\n" if content[end - 1] == "\n" else " ")
                index = end
                continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            segments.append("".join(current))
            current = []
            index += 1
            continue
        current.append(ch)
        index += 1

    if "".join(current).strip():
        segments.append("".join(current))
    return segments


def skip_string(text: str, index: int) -> int:
    """Return the index just past the string literal starting at *index*."""
    quote = text[index]
    index += 1
    while index < len(text):
        ch = text[index]
        if ch == "\\":
            index += 2
            continue
        if ch == quote:
            return index + 1
        index += 1
    return len(text)


def skip_comment(text: str, index: int) -> int:
    """Return the index past a comment at *index*, or *index* if none starts there.

    ``//``, ``#`` and ``/* */`` comments are recognised; ``#[`` opens an
    attribute, not a comment.
    """
    if text.startswith("/*", index):
        end = text.find("*/", index + 2)
        return len(text) if end == -1 else end + 2
    if text.startswith("//", index) or (
        text[index] == "#" and not text.startswith("#[", index)
    ):
        end = text.find("\n", index)
        return len(text) if end == -1 else end + 1
    return index


def find_matching(text: str, open_index: int) -> Optional[int]:
    """Return the index of the delimiter closing the one at *open_index*.

    Works for ``{}``, ``[]`` and ``()``. Quoted strings and comments are
    skipped. Returns ``None`` when the delimiter never balances.
    """
    opener = text[open_index]
    closer = {"{": "}", "[": "]", "(": ")"}[opener]
    depth = 0
    index = open_index

    while index < len(text):
        ch = text[index]
        if ch in ("'", '"'):
            index = skip_string(text, index)
            continue
        if ch in ("/", "#"):
            skipped = skip_comment(text, index)
            if skipped != index:
                index = skipped
                continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return index
        index += 1

    return None


def _append_entry(entries: dict[str, str], raw: str) -> None:
    raw = raw.strip()
    if not raw or "=>" not in raw:
        return

    key, _, expression = raw.partition("=>")
    key = key.strip()
    quoted = _QUOTED_KEY_RE.match(key)
    if quoted is not None:
        key = quoted.group(2)

    entries[key] = expression.strip().rstrip(",\n\r ")
