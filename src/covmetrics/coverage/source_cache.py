"""Source text cache for snippet extraction.

Reports list methods grouped by class, so consecutive methods usually share
one source file. The cache keeps the most recently used files decoded in
memory (LRU); capacity 1 keeps only the last file.

A cache instance is not thread-safe. Give each worker its own instance when
methods are processed in parallel.
"""

from __future__ import annotations

import codecs
import locale
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from covmetrics.coverage.snippets import SourceText

log = structlog.get_logger()

# UTF-32 LE first: its mark starts with the UTF-16 LE mark.
_BYTE_ORDER_MARKS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def decode_source(raw: bytes, fallback: str) -> str:
    """Decode file bytes, letting a byte-order mark override `fallback`.

    The mark itself is not part of the returned text.
    """
    for mark, encoding in _BYTE_ORDER_MARKS:
        if raw.startswith(mark):
            return raw[len(mark) :].decode(encoding)
    return raw.decode(fallback)


class SourceStatus(Enum):
    """Outcome of loading a source file."""

    LOADED = "loaded"
    ABSENT = "absent"
    READ_FAILED = "read_failed"
    DECODE_FAILED = "decode_failed"


@dataclass(frozen=True, slots=True)
class SourceLoad:
    """Result of SourceTextCache.load_result()."""

    path: str
    status: SourceStatus
    source: SourceText | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SourceStatus.LOADED


class SourceTextCache:
    """LRU cache of decoded source files keyed by path."""

    def __init__(self, capacity: int = 1, encoding: str | None = None) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._encoding = encoding
        self._entries: OrderedDict[str, SourceText] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def encoding(self) -> str:
        return self._encoding or locale.getpreferredencoding(False)

    @property
    def cached_paths(self) -> tuple[str, ...]:
        """Cached paths, least recently used first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def load(self, path: str) -> SourceText | None:
        """Return the decoded text of `path`, or None when unavailable."""
        return self.load_result(path).source

    def load_result(self, path: str) -> SourceLoad:
        """Load `path` through the cache, reporting why text is unavailable.

        Failures never raise. A failed load drops only the entry for `path`;
        other cached files stay, so a later method in one of them is still a
        hit. Files starting with a UTF-8, UTF-16 or UTF-32 byte-order mark are
        decoded with that encoding whatever `encoding` says.
        """
        cached = self._entries.get(path)
        if cached is not None:
            self._entries.move_to_end(path)
            log.debug("source_cache_hit", path=path)
            return SourceLoad(path=path, status=SourceStatus.LOADED, source=cached)

        if not path or not Path(path).is_file():
            return self._unavailable(path, SourceStatus.ABSENT, "file does not exist")

        try:
            raw = Path(path).read_bytes()
        except OSError as e:
            return self._unavailable(path, SourceStatus.READ_FAILED, str(e))

        try:
            text = decode_source(raw, self.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            return self._unavailable(path, SourceStatus.DECODE_FAILED, str(e))

        source = SourceText(text)
        self._entries[path] = source
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)
        log.debug("source_loaded", path=path, lines=source.line_count)
        return SourceLoad(path=path, status=SourceStatus.LOADED, source=source)

    def invalidate(self, path: str) -> None:
        self._entries.pop(path, None)

    def clear(self) -> None:
        self._entries.clear()

    def _unavailable(self, path: str, status: SourceStatus, reason: str) -> SourceLoad:
        self.invalidate(path)
        emit = log.debug if status is SourceStatus.ABSENT else log.warning
        emit("source_unavailable", path=path, status=status.value, reason=reason)
        return SourceLoad(path=path, status=status, reason=reason)
