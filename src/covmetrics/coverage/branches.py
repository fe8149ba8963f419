"""Branch ratio computation for one method.

Branch points carry no source position, only the instruction offset of the
decision. Each branch is attributed to the sequence point that encloses its
offset, branches of compiler-generated or rewritten code are dropped, and
duplicate exits of one decision are merged before counting.

Algorithm:
1. Locate the method body: first "{" and last "}" sequence point.
2. Walk branch points and sequence points with two forward-only cursors,
   attaching each branch to the last sequence point at or before its offset.
3. Skip unvisited sequence points and those matching the exclusion rules.
4. Merge branches sharing an exit offset, summing their visit counts.
5. Count merged branches with a nonzero visit count as covered.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import TypeVar

from covmetrics.config.models import OffsetOrderPolicy
from covmetrics.core.errors import AnalysisError
from covmetrics.coverage.models import BranchPoint, BranchRatio, SequencePoint

# Generated "in" code of foreach loops hides try/finally branches; "{" and "}"
# carry compiler-generated branches (static initialisation checks).
EXCLUDED_CONTENT = frozenset({"in", "{", "}"})

# Branches injected by Code Contracts rewriting and NUnit Assert helpers.
EXCLUDED_PREFIXES = ("Assert.", "Assert ", "Contract.", "Contract ")

_P = TypeVar("_P", SequencePoint, BranchPoint)


def is_excluded(content: str) -> bool:
    """True when branches at a sequence point with this text are not counted."""
    return content in EXCLUDED_CONTENT or content.startswith(EXCLUDED_PREFIXES)


def find_body_start(points: Sequence[SequencePoint]) -> int | None:
    """Index of the first "{" sequence point."""
    for index, sp in enumerate(points):
        if sp.content == "{":
            return index
    return None


def find_body_end(points: Sequence[SequencePoint]) -> int | None:
    """Index of the last "}" sequence point."""
    for index in range(len(points) - 1, -1, -1):
        if points[index].content == "}":
            return index
    return None


def order_by_offset(points: Sequence[_P], kind: str, policy: OffsetOrderPolicy) -> list[_P]:
    """Return `points` in ascending offset order.

    "sort" stable-sorts, so report order is kept among equal offsets.
    "strict" returns the points unchanged and raises on the first descent.
    """
    if policy == "sort":
        return sorted(points, key=lambda p: p.offset)
    for index in range(1, len(points)):
        if points[index].offset < points[index - 1].offset:
            raise AnalysisError.offsets_not_sorted(
                kind, index, points[index].offset, points[index - 1].offset
            )
    return list(points)


def associate_branches(
    sequence_points: Sequence[SequencePoint],
    branch_points: Sequence[BranchPoint],
    body_start: int,
    body_end: int,
) -> None:
    """Attach each in-body branch to its enclosing sequence point.

    Both sequences must be sorted by offset. `body_start` and `body_end` are
    indexes into `sequence_points`.
    """
    start_offset = sequence_points[body_start].offset
    end_offset = sequence_points[body_end].offset
    cursor = body_start
    last = len(sequence_points) - 1

    for bp in branch_points:
        if bp.offset < start_offset:
            continue
        if bp.offset > end_offset:
            break
        while cursor < last and sequence_points[cursor + 1].offset <= bp.offset:
            cursor += 1
        current = sequence_points[cursor]
        if current.branches is None:
            current.branches = []
        current.branches.append(bp)


def merge_branch_exits(branches: Sequence[BranchPoint]) -> list[BranchPoint]:
    """Merge branches with the same exit offset.

    The first branch per exit is kept (as a copy) and later visit counts are
    added to it. Input branches are not modified.
    """
    exits: dict[int, BranchPoint] = {}
    for bp in branches:
        merged = exits.get(bp.offset_end)
        if merged is None:
            exits[bp.offset_end] = replace(bp)
        else:
            merged.visit_count += bp.visit_count
    return list(exits.values())


def compute_branch_ratio(
    sequence_points: Sequence[SequencePoint],
    branch_points: Sequence[BranchPoint],
    *,
    offset_order: OffsetOrderPolicy = "sort",
) -> BranchRatio | None:
    """Covered/total branches of a method, or None when there is no branch data.

    Sequence points must already carry their source snippets. Their
    `branch_coverage` flag is cleared where a counted branch is uncovered.

    Raises:
        AnalysisError: offset_order is "strict" and either list is unsorted.
    """
    if not sequence_points or not branch_points:
        return None

    points = order_by_offset(sequence_points, "sequence point", offset_order)
    branches = order_by_offset(branch_points, "branch point", offset_order)

    body_start = find_body_start(points)
    if body_start is None:
        return None
    body_end = find_body_end(points)
    if body_end is None:
        return None

    for sp in points:
        sp.branches = None
    associate_branches(points, branches, body_start, body_end)

    covered = 0
    total = 0
    for sp in points:
        attached, sp.branches = sp.branches, None
        if not attached or sp.visit_count == 0 or is_excluded(sp.content):
            continue

        merged = merge_branch_exits(attached)
        point_covered = sum(1 for bp in merged if bp.visit_count != 0)
        if point_covered != len(merged):
            sp.branch_coverage = False
        covered += point_covered
        total += len(merged)

    if total == 0:
        return None
    return BranchRatio(covered=covered, total=total)
