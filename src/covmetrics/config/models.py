"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVMETRICS__SECTION__KEY)
3. Project YAML (.covmetrics/config.yaml)
4. Global YAML (~/.config/covmetrics/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVMETRICS__<SECTION>__<KEY>=<VALUE>

Examples:
    COVMETRICS__LOGGING__LEVEL=DEBUG
    COVMETRICS__SOURCE__CACHE_CAPACITY=8
    COVMETRICS__ANALYSIS__OFFSET_ORDER=strict
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OffsetOrderPolicy = Literal["sort", "strict"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVMETRICS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every source cache hit and miss.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class SourceConfig(BaseModel):
    """Source file loading for snippet extraction.

    Env vars:
        COVMETRICS__SOURCE__CACHE_CAPACITY: Number of source files kept in memory
        COVMETRICS__SOURCE__ENCODING: Text encoding (platform default if unset)
    """

    cache_capacity: int = Field(
        default=1,
        description="Source files kept decoded in memory (LRU). Reports list methods "
        "grouped by class, so 1 already hits for consecutive methods of one file.",
    )
    encoding: str | None = Field(
        default=None,
        description="Encoding used to decode source files. None uses the platform default.",
    )

    @field_validator("cache_capacity")
    @classmethod
    def validate_cache_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"cache_capacity must be >= 1, got {v}")
        return v


class AnalysisConfig(BaseModel):
    """Branch analysis configuration.

    Env vars:
        COVMETRICS__ANALYSIS__OFFSET_ORDER: "sort" or "strict"
    """

    offset_order: OffsetOrderPolicy = Field(
        default="sort",
        description="'sort' stable-sorts points by offset before association. "
        "'strict' rejects unsorted points and reports no branch data for that method.",
    )


class CovMetricsConfig(BaseModel):
    """Root configuration for covmetrics."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
