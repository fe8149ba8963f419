"""Tests for coverage point models."""

from decimal import Decimal

from covmetrics.coverage.models import BranchRatio, SequencePoint


class TestBranchRatio:
    """Tests for BranchRatio.percent."""

    def test_exact(self) -> None:
        assert BranchRatio(1, 2).percent == Decimal("50.00")

    def test_two_decimal_places(self) -> None:
        assert BranchRatio(1, 3).percent == Decimal("33.33")
        assert BranchRatio(2, 3).percent == Decimal("66.67")

    def test_rounds_half_to_even(self) -> None:
        # 1/8 = 12.5%, 1/16 = 6.25%, 1/32 = 3.125% -> 3.12
        assert BranchRatio(1, 32).percent == Decimal("3.12")
        assert BranchRatio(3, 32).percent == Decimal("9.38")

    def test_full_and_zero(self) -> None:
        assert str(BranchRatio(4, 4).percent) == "100.00"
        assert str(BranchRatio(0, 4).percent) == "0.00"

    def test_is_a_tuple(self) -> None:
        covered, total = BranchRatio(covered=3, total=5)
        assert (covered, total) == (3, 5)


class TestSequencePoint:
    """Tests for SequencePoint defaults."""

    def test_defaults(self) -> None:
        sp = SequencePoint(
            file_id="1",
            document="Calc.cs",
            line=3,
            end_line=4,
            column=1,
            end_column=2,
            visit_count=0,
            offset=12,
        )
        assert sp.content == ""
        assert sp.length == 0
        assert sp.branch_coverage is True
        assert sp.branches is None
        assert not sp.is_single_line
