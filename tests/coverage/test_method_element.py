"""Tests for CoverageMethodElement.

Covers:
- method name parsing
- tolerant attribute extraction
- source annotation and branch ratio end to end
- no-data vs zero-coverage states
- determinism
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from decimal import Decimal
from pathlib import Path

import pytest

from covmetrics.core.errors import AnalysisError, ErrorCode
from covmetrics.coverage.method import CoverageMethodElement, parse_method_name
from covmetrics.coverage.models import BranchRatio
from covmetrics.coverage.records import MethodRecord
from covmetrics.coverage.source_cache import SourceStatus, SourceTextCache

ABS_SOURCE = "{\n    if(x)\n}\n"

ABS_METHOD = """\
<Method visited="true" cyclomaticComplexity="2" sequenceCoverage="66.67"
        isConstructor="false" isStatic="true" isGetter="false" isSetter="false">
  <Summary numSequencePoints="3"/>
  <Name>System.Int32 Demo.Calc::Abs(System.Int32)</Name>
  <FileRef uid="1"/>
  <SequencePoints>
    <SequencePoint vc="1" offset="0" sl="1" sc="1" el="1" ec="2"/>
    <SequencePoint vc="1" offset="4" sl="2" sc="5" el="2" ec="10"/>
    <SequencePoint vc="1" offset="8" sl="3" sc="1" el="3" ec="2"/>
  </SequencePoints>
  <BranchPoints>
    <BranchPoint vc="1" offset="4" path="0" offsetend="10"/>
    <BranchPoint vc="0" offset="4" path="1" offsetend="20"/>
  </BranchPoints>
</Method>
"""


class _Report:
    """File id resolver standing in for a loaded report."""

    def __init__(self, files: dict[str, str]) -> None:
        self._files = files

    def file_name(self, file_id: str) -> str:
        return self._files.get(file_id, "")


def _record(xml: str) -> MethodRecord:
    return MethodRecord.from_element(ET.fromstring(xml))


@pytest.fixture
def abs_file(tmp_path: Path) -> Path:
    path = tmp_path / "Calc.cs"
    path.write_text(ABS_SOURCE, encoding="utf-8")
    return path


def _build(xml: str, path: Path | None, **kwargs: object) -> CoverageMethodElement:
    report = _Report({"1": str(path)} if path else {})
    cache = SourceTextCache(encoding="utf-8")
    return CoverageMethodElement.from_record(_record(xml), report, cache=cache, **kwargs)  # type: ignore[arg-type]


# =============================================================================
# parse_method_name
# =============================================================================


class TestParseMethodName:
    """Tests for parse_method_name."""

    @pytest.mark.parametrize(
        ("signature", "expected"),
        [
            ("System.Int32 Demo.Calc::Abs(System.Int32)", "Abs"),
            ("System.Void Demo.Calc::.ctor()", ".ctor"),
            ("System.String Demo.Person::get_Name()", "get_Name"),
            ("System.Void Demo.Outer/Inner::Run(System.Func`1<System.Int32>)", "Run"),
            ("System.Void Demo.Calc::()", ""),
        ],
    )
    def test_extracts_name(self, signature: str, expected: str) -> None:
        assert parse_method_name(signature) == expected

    @pytest.mark.parametrize("signature", ["Abs(System.Int32)", "Demo.Calc::Abs", ""])
    def test_malformed_signature_raises(self, signature: str) -> None:
        with pytest.raises(AnalysisError) as exc_info:
            parse_method_name(signature)
        assert exc_info.value.code == ErrorCode.MALFORMED_SIGNATURE

    def test_paren_before_separator_is_ignored(self) -> None:
        with pytest.raises(AnalysisError):
            parse_method_name("Foo(Bar)::Baz")


# =============================================================================
# End to end
# =============================================================================


class TestFromRecord:
    """Tests for CoverageMethodElement.from_record."""

    def test_half_covered_method(self, abs_file: Path) -> None:
        element = _build(ABS_METHOD, abs_file)

        assert element.method_name == "Abs"
        assert element.file_id == "1"
        assert element.file_name == str(abs_file)
        assert element.source_status is SourceStatus.LOADED
        assert [sp.content for sp in element.sequence_points] == ["{", "if(x)", "}"]
        assert element.branch_coverage_ratio == BranchRatio(covered=1, total=2)
        assert element.branch_coverage == Decimal("50.00")
        assert element.sequence_points[1].branch_coverage is False

    def test_scalar_attributes(self, abs_file: Path) -> None:
        element = _build(ABS_METHOD, abs_file)

        assert element.is_visited is True
        assert element.cyclomatic_complexity == 2
        assert element.sequence_points_count == 3
        assert element.is_static is True
        assert element.is_constructor is False
        assert element.is_property is False

    def test_sequence_coverage_is_truncated(self, abs_file: Path) -> None:
        element = _build(ABS_METHOD, abs_file)

        assert element.sequence_coverage == 66
        assert element.sequence_coverage_exact == Decimal("66.67")

    def test_points_are_parsed(self, abs_file: Path) -> None:
        element = _build(ABS_METHOD, abs_file)

        first = element.sequence_points[0]
        assert (first.line, first.column, first.end_line, first.end_column) == (1, 1, 1, 2)
        assert first.document == str(abs_file)
        assert first.file_id == "1"
        assert [bp.offset_end for bp in element.branch_points] == [10, 20]
        assert [bp.path for bp in element.branch_points] == [0, 1]
        # merging works on copies
        assert [bp.visit_count for bp in element.branch_points] == [1, 0]

    def test_fully_covered(self, abs_file: Path) -> None:
        xml = ABS_METHOD.replace('vc="0" offset="4"', 'vc="5" offset="4"')

        element = _build(xml, abs_file)

        assert element.branch_coverage_ratio == BranchRatio(covered=2, total=2)
        assert str(element.branch_coverage) == "100.00"

    def test_deterministic(self, abs_file: Path) -> None:
        first = _build(ABS_METHOD, abs_file)
        second = _build(ABS_METHOD, abs_file)

        assert first == second
        assert first.to_dict() == second.to_dict()


# =============================================================================
# Degraded inputs
# =============================================================================


class TestDegradedInputs:
    """No per-method problem raises; metrics degrade to defaults."""

    def test_utf16_source_with_byte_order_mark(self, tmp_path: Path) -> None:
        path = tmp_path / "Wide.cs"
        path.write_bytes(("\ufeff" + ABS_SOURCE).encode("utf-16-le"))

        element = _build(ABS_METHOD, path)

        assert element.source_status is SourceStatus.LOADED
        assert [sp.content for sp in element.sequence_points] == ["{", "if(x)", "}"]
        assert element.branch_coverage_ratio == BranchRatio(covered=1, total=2)

    def test_missing_source_gives_no_branch_data(self, tmp_path: Path) -> None:
        element = _build(ABS_METHOD, tmp_path / "Missing.cs")

        assert element.source_status is SourceStatus.ABSENT
        assert all(sp.content == "" for sp in element.sequence_points)
        assert len(element.sequence_points) == 3
        assert element.branch_coverage_ratio is None
        assert element.branch_coverage == Decimal(0)

    def test_unknown_file_id(self) -> None:
        element = _build(ABS_METHOD, None)

        assert element.file_id == "1"
        assert element.file_name == ""
        assert element.source_status is SourceStatus.ABSENT
        assert element.branch_coverage_ratio is None

    def test_no_file_ref_skips_points(self) -> None:
        xml = ABS_METHOD.replace('<FileRef uid="1"/>', "")

        element = _build(xml, None)

        assert element.file_id == ""
        assert element.source_status is None
        assert element.sequence_points == ()
        assert element.branch_points == ()
        assert element.branch_coverage_ratio is None
        assert element.method_name == "Abs"
        assert element.sequence_points_count == 3

    def test_no_branches_is_no_data(self, abs_file: Path) -> None:
        xml = ABS_METHOD.split("<BranchPoints>")[0] + "</Method>"

        element = _build(xml, abs_file)

        assert element.branch_coverage_ratio is None
        assert element.branch_coverage == Decimal(0)

    def test_malformed_signature_gives_empty_name(self, abs_file: Path) -> None:
        xml = ABS_METHOD.replace("Demo.Calc::Abs(System.Int32)", "Demo.Calc.Abs")

        element = _build(xml, abs_file)

        assert element.method_name == ""
        assert element.branch_coverage_ratio == BranchRatio(covered=1, total=2)

    def test_missing_name(self, abs_file: Path) -> None:
        xml = ABS_METHOD.replace("<Name>System.Int32 Demo.Calc::Abs(System.Int32)</Name>", "")
        assert _build(xml, abs_file).method_name == ""

    def test_unparsable_attributes(self, abs_file: Path) -> None:
        xml = (
            ABS_METHOD.replace('visited="true"', 'visited="yes"')
            .replace('cyclomaticComplexity="2"', 'cyclomaticComplexity="n/a"')
            .replace('<Summary numSequencePoints="3"/>', "")
            .replace('isStatic="true"', "")
        )

        element = _build(xml, abs_file)

        assert element.is_visited is False
        assert element.cyclomatic_complexity == 0
        assert element.sequence_points_count == 0
        assert element.is_static is False

    def test_getter_is_property(self, abs_file: Path) -> None:
        xml = ABS_METHOD.replace('isGetter="false"', 'isGetter="true"')
        assert _build(xml, abs_file).is_property is True

    def test_strict_order_violation_gives_no_data(self, abs_file: Path) -> None:
        xml = ABS_METHOD.replace(
            '<SequencePoint vc="1" offset="8"', '<SequencePoint vc="1" offset="2"'
        )

        element = _build(xml, abs_file, offset_order="strict")

        assert element.branch_coverage_ratio is None
        assert element.branch_coverage == Decimal(0)


class TestSharedCache:
    """Methods of one file share a cache entry."""

    def test_consecutive_methods_reuse_source(self, abs_file: Path) -> None:
        report = _Report({"1": str(abs_file)})
        cache = SourceTextCache(encoding="utf-8")

        CoverageMethodElement.from_record(_record(ABS_METHOD), report, cache=cache)
        cached = cache.load(str(abs_file))
        CoverageMethodElement.from_record(_record(ABS_METHOD), report, cache=cache)

        assert cache.load(str(abs_file)) is cached
        assert cache.cached_paths == (str(abs_file),)

    def test_private_cache_when_omitted(self, abs_file: Path) -> None:
        element = CoverageMethodElement.from_record(
            _record(ABS_METHOD), _Report({"1": str(abs_file)})
        )
        assert element.method_name == "Abs"
        assert element.source_status is SourceStatus.LOADED
