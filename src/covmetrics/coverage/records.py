r"""Raw per-method records from an OpenCover report.

One <Method> element looks like:

<Method visited="true" cyclomaticComplexity="2" sequenceCoverage="66.67"
        isConstructor="false" isStatic="false" isGetter="false" isSetter="false">
  <Summary numSequencePoints="3" .../>
  <Name>System.Int32 Demo.Calc::Abs(System.Int32)</Name>
  <FileRef uid="1"/>
  <SequencePoints>
    <SequencePoint vc="1" offset="0" sl="10" sc="5" el="10" ec="6"/>
  </SequencePoints>
  <BranchPoints>
    <BranchPoint vc="1" offset="4" offsetend="10" path="0"/>
  </BranchPoints>
</Method>

Attribute values are kept as strings and parsed tolerantly: reports from
different tool versions omit or vary optional attributes, so anything
absent or unparsable reads as 0 / False.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

_ZERO = Decimal(0)
# Optional sign, digits, optional fraction. No exponent, no digit separators.
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)", re.ASCII)


def parse_decimal(value: str | None) -> Decimal:
    """Parse a decimal attribute value; absent or unparsable -> 0."""
    if value is None:
        return _ZERO
    text = value.strip()
    if not _NUMBER.fullmatch(text):
        return _ZERO
    return Decimal(text)


def parse_int(value: str | None) -> int:
    """Parse a numeric attribute value, truncating toward zero."""
    return int(parse_decimal(value))


def parse_bool(value: str | None) -> bool:
    """Parse "true"/"false" (any case, surrounding whitespace ignored); else False."""
    if value is None:
        return False
    return value.strip().lower() == "true"


@dataclass(frozen=True, slots=True)
class MethodRecord:
    """Attribute view of one <Method> element."""

    attributes: Mapping[str, str] = field(default_factory=dict)
    name: str | None = None  # fully qualified signature from <Name>
    file_ref: str = ""  # <FileRef uid>
    summary: Mapping[str, str] | None = None
    sequence_points: tuple[Mapping[str, str], ...] = ()
    branch_points: tuple[Mapping[str, str], ...] = ()

    @classmethod
    def from_element(cls, element: ET.Element) -> MethodRecord:
        name_elem = element.find("Name")
        file_ref_elem = element.find("FileRef")
        summary_elem = element.find("Summary")
        return cls(
            attributes=dict(element.attrib),
            name=(name_elem.text or "") if name_elem is not None else None,
            file_ref=file_ref_elem.get("uid", "") if file_ref_elem is not None else "",
            summary=dict(summary_elem.attrib) if summary_elem is not None else None,
            sequence_points=tuple(
                dict(sp.attrib) for sp in element.findall("SequencePoints/SequencePoint")
            ),
            branch_points=tuple(
                dict(bp.attrib) for bp in element.findall("BranchPoints/BranchPoint")
            ),
        )

    def get_decimal(self, name: str) -> Decimal:
        return parse_decimal(self.attributes.get(name))

    def get_int(self, name: str) -> int:
        return parse_int(self.attributes.get(name))

    def get_bool(self, name: str) -> bool:
        return parse_bool(self.attributes.get(name))

    @property
    def num_sequence_points(self) -> int:
        """Sequence point count from <Summary>, independent of the detailed list."""
        if self.summary is None:
            return 0
        return parse_int(self.summary.get("numSequencePoints"))
