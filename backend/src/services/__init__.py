"""Services for aggregating, filtering and exporting analysis history."""

from .history_export_service import ExportPayload, serialize_records
from .history_filter_service import apply_view
from .history_metrics_service import compute_metrics
from .history_service import HistoryService

__all__ = [
    "ExportPayload",
    "HistoryService",
    "apply_view",
    "compute_metrics",
    "serialize_records",
]
