"""Config module exports."""

from covmetrics.config.loader import load_config
from covmetrics.config.models import (
    AnalysisConfig,
    CovMetricsConfig,
    LoggingConfig,
    LogOutputConfig,
    SourceConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "CovMetricsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "SourceConfig",
]
