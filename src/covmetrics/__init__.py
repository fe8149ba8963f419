"""covmetrics - method-level coverage metrics for OpenCover reports."""

__version__ = "0.1.0"
