"""covmetrics error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Report
- 4xxx: Analysis
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Report (3xxx)
    REPORT_NOT_FOUND = 3001
    REPORT_INVALID_XML = 3002

    # Analysis (4xxx)
    MALFORMED_SIGNATURE = 4001
    OFFSETS_NOT_SORTED = 4002


@dataclass(frozen=True, slots=True)
class CovMetricsError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REPORT_INVALID_XML')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CovMetricsError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ReportError(CovMetricsError):
    """Errors reading an OpenCover report as a whole."""

    @classmethod
    def not_found(cls, path: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_NOT_FOUND,
            message=f"No OpenCover report found at {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_xml(cls, path: str, reason: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_INVALID_XML,
            message=f"Invalid OpenCover XML in {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class AnalysisError(CovMetricsError):
    """Per-method analysis errors. Recovered at the method boundary."""

    @classmethod
    def malformed_signature(cls, signature: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.MALFORMED_SIGNATURE,
            message=f"Method signature lacks '::' or '(': {signature!r}",
            details={"signature": signature},
        )

    @classmethod
    def offsets_not_sorted(cls, kind: str, index: int, offset: int, previous: int) -> "AnalysisError":
        return cls(
            code=ErrorCode.OFFSETS_NOT_SORTED,
            message=f"{kind} offsets not ascending at index {index}: {offset} < {previous}",
            details={"kind": kind, "index": index, "offset": offset, "previous": previous},
        )

