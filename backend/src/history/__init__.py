"""Analysis history domain types."""

from .errors import (
    HistoryError,
    InvalidRecordError,
    InvalidSpecError,
    UnsupportedExportFormatError,
)
from .models import (
    AnalysisRecord,
    AnalysisStatus,
    ChartDataPoint,
    DateRange,
    FilterOptions,
    MetricsSnapshot,
    SkillComparison,
    SortOptions,
    Usernames,
    ensure_unique_ids,
)

__all__ = [
    "AnalysisRecord",
    "AnalysisStatus",
    "ChartDataPoint",
    "DateRange",
    "FilterOptions",
    "HistoryError",
    "InvalidRecordError",
    "InvalidSpecError",
    "MetricsSnapshot",
    "SkillComparison",
    "SortOptions",
    "UnsupportedExportFormatError",
    "Usernames",
    "ensure_unique_ids",
]
