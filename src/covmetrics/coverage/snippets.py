"""Source snippet extraction for sequence points.

A snippet is the source text a sequence point spans. Multi-line snippets are
collapsed to a single line so that short statements spread over several
lines ("{" on its own line, wrapped calls) still compare equal to their
one-line form.
"""

from __future__ import annotations

import re

from covmetrics.coverage.models import SequencePoint

_NEWLINE = re.compile(r"\r\n|\r|\n")
_WHITESPACE_RUN = re.compile(r"\s+")
_WHITESPACE = re.compile(r"\s")

_BOM = "\ufeff"


class SourceText:
    """Decoded text of one source file, addressable by 1-based line."""

    __slots__ = ("_lines",)

    def __init__(self, text: str) -> None:
        if text.startswith(_BOM):
            text = text[len(_BOM) :]
        self._lines = _NEWLINE.split(text)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line(self, number: int) -> str:
        """Return line `number` without its terminator, or "" when out of range."""
        if 1 <= number <= len(self._lines):
            return self._lines[number - 1]
        return ""

    def get_text(self, start_line: int, start_col: int, end_line: int, end_col: int) -> str:
        """Raw text between two 1-based positions, end column exclusive.

        Lines of a multi-line span are joined with "\\n". Positions outside
        the file are clamped; an inverted span yields "".
        """
        if start_line > end_line or start_line > len(self._lines) or end_line < 1:
            return ""
        if start_line == end_line:
            text = self.line(start_line)
            return text[max(start_col - 1, 0) : max(end_col - 1, 0)]

        first = max(start_line, 1)
        last = min(end_line, len(self._lines))
        parts = [self.line(n) for n in range(first, last + 1)]
        if first == start_line:
            parts[0] = parts[0][max(start_col - 1, 0) :]
        if last == end_line:
            parts[-1] = parts[-1][: max(end_col - 1, 0)]
        return "\n".join(parts)


def extract_snippet(
    source: SourceText | None,
    start_line: int,
    start_col: int,
    end_line: int,
    end_col: int,
) -> tuple[str, int]:
    """Return (text, weight) for a span.

    Multi-line text has every whitespace run collapsed to one space. The
    weight is the text length ignoring whitespace.
    """
    if source is None:
        return "", 0
    text = source.get_text(start_line, start_col, end_line, end_col)
    if start_line != end_line:
        text = _WHITESPACE_RUN.sub(" ", text)
    return text, len(_WHITESPACE.sub("", text))


def annotate(points: list[SequencePoint], source: SourceText | None) -> None:
    """Fill content and length of every sequence point from `source`."""
    for sp in points:
        sp.content, sp.length = extract_snippet(
            source, sp.line, sp.column, sp.end_line, sp.end_column
        )
