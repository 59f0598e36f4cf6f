"""Reports and exports built on the translation store."""

from .analytics import (
    AnalyticsEngine,
    CoverageReport,
    ExportResult,
    MissingKeysReport,
    QualityAnalysis,
    UsageAnalysis,
)

__all__ = [
    "AnalyticsEngine",
    "CoverageReport",
    "ExportResult",
    "MissingKeysReport",
    "QualityAnalysis",
    "UsageAnalysis",
]
