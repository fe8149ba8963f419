"""Per-method coverage point records.

Sequence points and branch points are parsed once per method from the
report. After construction only a few fields change: a sequence point gets
its source snippet and may lose its fully-covered flag, and a branch point
may absorb the visit count of a duplicate exit during merging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal
from typing import NamedTuple

_PERCENT_QUANTUM = Decimal("0.01")


@dataclass(slots=True)
class BranchPoint:
    """One outgoing edge of a decision instruction."""

    visit_count: int
    offset: int
    offset_end: int  # offset of the instruction reached when taken
    path: int = 0


@dataclass(slots=True)
class SequencePoint:
    """An instrumented source span with its visit counter.

    Lines and columns are 1-based; the end column is exclusive.
    """

    file_id: str
    document: str
    line: int
    end_line: int
    column: int
    end_column: int
    visit_count: int
    offset: int
    content: str = ""
    length: int = 0  # len(content) without whitespace
    branch_coverage: bool = True  # False when any merged branch here is uncovered
    branches: list[BranchPoint] | None = field(default=None, repr=False, compare=False)

    @property
    def is_single_line(self) -> bool:
        return self.line == self.end_line


class BranchRatio(NamedTuple):
    """Covered vs. countable branches for one method."""

    covered: int
    total: int

    @property
    def percent(self) -> Decimal:
        """Covered share in percent, rounded half-to-even to two places."""
        return (Decimal(self.covered * 100) / Decimal(self.total)).quantize(
            _PERCENT_QUANTUM, rounding=ROUND_HALF_EVEN
        )
