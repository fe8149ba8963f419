"""Method-level coverage metrics.

CoverageMethodElement turns one raw <Method> record into its public metrics.
Everything is computed at construction; the element is read-only afterwards.
No per-method problem is raised to the caller: malformed attributes read as
defaults, unreadable sources give empty snippets, and analysis errors leave
the branch ratio absent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

import structlog

from covmetrics.config.models import OffsetOrderPolicy
from covmetrics.core.errors import AnalysisError
from covmetrics.coverage.branches import compute_branch_ratio
from covmetrics.coverage.models import BranchPoint, BranchRatio, SequencePoint
from covmetrics.coverage.records import MethodRecord, parse_int
from covmetrics.coverage.snippets import annotate
from covmetrics.coverage.source_cache import SourceStatus, SourceTextCache

log = structlog.get_logger()

_ZERO = Decimal(0)


class FileResolver(Protocol):
    """Resolves report file ids to paths (the owning report)."""

    def file_name(self, file_id: str) -> str:
        """Path for `file_id`, or "" when unknown."""
        ...


def parse_method_name(signature: str) -> str:
    """Extract the method name from a fully qualified signature.

    "System.Void Demo.Calc::Add(System.Int32)" -> "Add"

    Raises:
        AnalysisError: The signature has no "::" or no "(" after it.
    """
    start = signature.find("::")
    if start < 0:
        raise AnalysisError.malformed_signature(signature)
    end = signature.find("(", start)
    if end < 0:
        raise AnalysisError.malformed_signature(signature)
    return signature[start + 2 : end]


def _sequence_point(attrs: Mapping[str, str], file_id: str, document: str) -> SequencePoint:
    return SequencePoint(
        file_id=file_id,
        document=document,
        line=parse_int(attrs.get("sl")),
        end_line=parse_int(attrs.get("el")),
        column=parse_int(attrs.get("sc")),
        end_column=parse_int(attrs.get("ec")),
        visit_count=parse_int(attrs.get("vc")),
        offset=parse_int(attrs.get("offset")),
    )


def _branch_point(attrs: Mapping[str, str]) -> BranchPoint:
    return BranchPoint(
        visit_count=parse_int(attrs.get("vc")),
        offset=parse_int(attrs.get("offset")),
        offset_end=parse_int(attrs.get("offsetend")),
        path=parse_int(attrs.get("path")),
    )


@dataclass(frozen=True, slots=True)
class CoverageMethodElement:
    """Coverage metrics of one method."""

    method_name: str
    file_id: str
    file_name: str
    is_visited: bool
    cyclomatic_complexity: int
    sequence_points_count: int
    sequence_coverage: int  # report value truncated toward zero
    sequence_coverage_exact: Decimal
    branch_coverage: Decimal
    branch_coverage_ratio: BranchRatio | None
    is_constructor: bool
    is_static: bool
    is_getter: bool
    is_setter: bool
    sequence_points: tuple[SequencePoint, ...] = ()
    branch_points: tuple[BranchPoint, ...] = ()
    source_status: SourceStatus | None = None  # None when the method has no file

    @property
    def is_property(self) -> bool:
        return self.is_getter or self.is_setter

    @classmethod
    def from_record(
        cls,
        record: MethodRecord,
        report: FileResolver,
        *,
        cache: SourceTextCache | None = None,
        offset_order: OffsetOrderPolicy = "sort",
    ) -> CoverageMethodElement:
        """Build the element for one raw method record.

        Args:
            record: Raw <Method> record.
            report: Owning report, used to resolve the file id to a path.
            cache: Source cache shared across the methods of one report load.
                   A private cache is used when omitted.
            offset_order: Offset ordering policy for branch association.
        """
        method_name = _method_name(record)
        file_id = record.file_ref
        file_name = report.file_name(file_id) if file_id else ""

        sequence_points: list[SequencePoint] = []
        branch_points: list[BranchPoint] = []
        ratio: BranchRatio | None = None
        source_status: SourceStatus | None = None

        if file_id:
            cache = cache if cache is not None else SourceTextCache()
            loaded = cache.load_result(file_name)
            source_status = loaded.status

            sequence_points = [
                _sequence_point(attrs, file_id, file_name) for attrs in record.sequence_points
            ]
            annotate(sequence_points, loaded.source)
            branch_points = [_branch_point(attrs) for attrs in record.branch_points]

            try:
                ratio = compute_branch_ratio(
                    sequence_points, branch_points, offset_order=offset_order
                )
            except AnalysisError as e:
                log.warning(
                    "offset_order_violation",
                    method=method_name,
                    file=file_name,
                    error=e.error_name,
                    **e.details,
                )
                ratio = None

        sequence_coverage_exact = record.get_decimal("sequenceCoverage")
        return cls(
            method_name=method_name,
            file_id=file_id,
            file_name=file_name,
            is_visited=record.get_bool("visited"),
            cyclomatic_complexity=record.get_int("cyclomaticComplexity"),
            sequence_points_count=record.num_sequence_points,
            sequence_coverage=int(sequence_coverage_exact),
            sequence_coverage_exact=sequence_coverage_exact,
            branch_coverage=ratio.percent if ratio is not None else _ZERO,
            branch_coverage_ratio=ratio,
            is_constructor=record.get_bool("isConstructor"),
            is_static=record.get_bool("isStatic"),
            is_getter=record.get_bool("isGetter"),
            is_setter=record.get_bool("isSetter"),
            sequence_points=tuple(sequence_points),
            branch_points=tuple(branch_points),
            source_status=source_status,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the public metrics for JSON output."""
        ratio = self.branch_coverage_ratio
        return {
            "method": self.method_name,
            "file": self.file_name,
            "visited": self.is_visited,
            "cyclomatic_complexity": self.cyclomatic_complexity,
            "sequence_points": self.sequence_points_count,
            "sequence_coverage": self.sequence_coverage,
            "branch_coverage": float(self.branch_coverage),
            "branches_covered": ratio.covered if ratio is not None else None,
            "branches_total": ratio.total if ratio is not None else None,
            "is_constructor": self.is_constructor,
            "is_static": self.is_static,
            "is_property": self.is_property,
        }


def _method_name(record: MethodRecord) -> str:
    if record.name is None:
        return ""
    try:
        return parse_method_name(record.name)
    except AnalysisError as e:
        log.warning("method_signature_malformed", signature=record.name, error=e.error_name)
        return ""
