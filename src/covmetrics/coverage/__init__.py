"""Method-level coverage metrics from OpenCover reports.

Usage:
    from covmetrics.coverage import OpenCoverReport

    report = OpenCoverReport.load(Path("coverage.opencover.xml"))
    for method in report.methods:
        print(method.method_name, method.branch_coverage)
"""

from covmetrics.coverage.branches import (
    associate_branches,
    compute_branch_ratio,
    find_body_end,
    find_body_start,
    is_excluded,
    merge_branch_exits,
)
from covmetrics.coverage.method import CoverageMethodElement, FileResolver, parse_method_name
from covmetrics.coverage.models import BranchPoint, BranchRatio, SequencePoint
from covmetrics.coverage.opencover import OpenCoverReport, find_report_file, is_opencover
from covmetrics.coverage.records import MethodRecord, parse_bool, parse_decimal, parse_int
from covmetrics.coverage.snippets import SourceText, annotate, extract_snippet
from covmetrics.coverage.source_cache import SourceLoad, SourceStatus, SourceTextCache

__all__ = [
    # Models
    "BranchPoint",
    "BranchRatio",
    "SequencePoint",
    # Source
    "SourceLoad",
    "SourceStatus",
    "SourceText",
    "SourceTextCache",
    "annotate",
    "extract_snippet",
    # Branches
    "associate_branches",
    "compute_branch_ratio",
    "find_body_end",
    "find_body_start",
    "is_excluded",
    "merge_branch_exits",
    # Records
    "MethodRecord",
    "parse_bool",
    "parse_decimal",
    "parse_int",
    # Methods
    "CoverageMethodElement",
    "FileResolver",
    "parse_method_name",
    # Report
    "OpenCoverReport",
    "find_report_file",
    "is_opencover",
]
