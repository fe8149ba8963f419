r"""OpenCover XML report loading.

Structure:
<CoverageSession>
  <Modules>
    <Module>
      <Files>
        <File uid="1" fullPath="C:\src\Foo.cs"/>
      </Files>
      <Classes>
        <Class>
          <FullName>MyNamespace.MyClass</FullName>
          <Methods>
            <Method visited="true" ...>
              <Name>System.Void MyNamespace.MyClass::MyMethod()</Name>
              <FileRef uid="1"/>
              ...
            </Method>
          </Methods>
        </Class>
      </Classes>
    </Module>
  </Modules>
</CoverageSession>

The report only resolves file ids and yields one CoverageMethodElement per
<Method>; rolling metrics up to classes or modules is left to the caller.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from pathlib import Path

import structlog

from covmetrics.config.models import CovMetricsConfig
from covmetrics.core.errors import ReportError
from covmetrics.core.logging import set_run_id
from covmetrics.coverage.method import CoverageMethodElement
from covmetrics.coverage.records import MethodRecord
from covmetrics.coverage.source_cache import SourceTextCache

log = structlog.get_logger()

_REPORT_NAMES = ("coverage.opencover.xml", "opencover.xml", "coverage.xml")


def is_opencover(path: Path) -> bool:
    """Check if path contains OpenCover coverage data."""
    if path.is_dir():
        for name in _REPORT_NAMES:
            if (path / name).exists():
                return True
        # Coverlet TestResults structure
        for results_dir in path.glob("TestResults/*"):
            if results_dir.is_dir() and any(results_dir.glob("coverage.opencover.xml")):
                return True
        return False

    if not path.is_file():
        return False

    # Content sniff
    try:
        with path.open("rb") as f:
            header = f.read(2048).decode("utf-8", errors="ignore")
    except OSError:
        return False
    return "<CoverageSession" in header or "<SequencePoint" in header


def find_report_file(path: Path) -> Path:
    """Resolve a report file or a directory holding one."""
    if path.is_file():
        return path

    for name in _REPORT_NAMES:
        candidate = path / name
        if candidate.exists():
            return candidate

    xml_files = sorted(path.glob("TestResults/*/coverage.opencover.xml"))
    if xml_files:
        return xml_files[0]

    raise ReportError.not_found(str(path))


class OpenCoverReport:
    """A loaded OpenCover report.

    Methods are built in document order with one SourceTextCache shared
    across the whole load, so consecutive methods of one file read it once.
    """

    def __init__(
        self,
        root: ET.Element,
        *,
        config: CovMetricsConfig | None = None,
        cache: SourceTextCache | None = None,
        source_path: Path | None = None,
    ) -> None:
        self._config = config or CovMetricsConfig()
        if cache is None:
            cache = SourceTextCache(
                capacity=self._config.source.cache_capacity,
                encoding=self._config.source.encoding,
            )
        self._cache = cache
        self.source_path = source_path
        self._files: dict[str, str] = {}

        for file_elem in root.iter("File"):
            uid = file_elem.get("uid", "")
            full_path = file_elem.get("fullPath", "")
            if uid and full_path:
                self._files[uid] = full_path

        offset_order = self._config.analysis.offset_order
        self._methods = [
            CoverageMethodElement.from_record(
                MethodRecord.from_element(method),
                self,
                cache=self._cache,
                offset_order=offset_order,
            )
            for method in root.iter("Method")
        ]

    @classmethod
    def load(
        cls,
        path: Path,
        *,
        config: CovMetricsConfig | None = None,
        cache: SourceTextCache | None = None,
    ) -> OpenCoverReport:
        """Parse an OpenCover XML file (or a directory containing one).

        Raises:
            ReportError: No report found, or the XML is malformed.
        """
        if not path.exists():
            raise ReportError.not_found(str(path))

        xml_file = find_report_file(path)
        try:
            tree = ET.parse(xml_file)
        except ET.ParseError as e:
            raise ReportError.invalid_xml(str(xml_file), str(e)) from e

        set_run_id()
        report = cls(tree.getroot(), config=config, cache=cache, source_path=xml_file)
        log.info(
            "report_loaded",
            path=str(xml_file),
            files=len(report.files),
            methods=len(report.methods),
        )
        return report

    @property
    def files(self) -> dict[str, str]:
        """File id -> path mapping."""
        return dict(self._files)

    @property
    def methods(self) -> list[CoverageMethodElement]:
        return list(self._methods)

    @property
    def cache(self) -> SourceTextCache:
        return self._cache

    def file_name(self, file_id: str) -> str:
        return self._files.get(file_id, "")

    def __iter__(self) -> Iterator[CoverageMethodElement]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)
