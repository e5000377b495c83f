"""Entry point for analysis-history aggregation.

``HistoryService`` holds no record state: every call receives the
collection it works on, so one instance can be shared freely.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..history.models import (
    AnalysisRecord,
    FilterOptions,
    MetricsSnapshot,
    SortOptions,
    ensure_unique_ids,
)
from .history_export_service import ExportPayload, build_entry_report, serialize_records
from .history_filter_service import apply_view
from .history_metrics_service import compute_metrics
from .history_progress_service import PROGRESSION_LIMIT, score_progression, skill_comparison

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryService:
    """Metrics, table views, chart series and exports over analysis records."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or _utc_now

    @staticmethod
    def _prepare(records: Iterable[AnalysisRecord]) -> Sequence[AnalysisRecord]:
        snapshot = tuple(records)
        ensure_unique_ids(snapshot)
        return snapshot

    def metrics(self, records: Iterable[AnalysisRecord]) -> MetricsSnapshot:
        snapshot = self._prepare(records)
        result = compute_metrics(snapshot, now=self._clock())
        logger.debug(
            "Computed metrics over %d records (%d complete)",
            len(snapshot),
            result.total_complete,
        )
        return result

    def view(
        self,
        records: Iterable[AnalysisRecord],
        filters: Optional[FilterOptions] = None,
        sort: Optional[SortOptions] = None,
    ) -> List[AnalysisRecord]:
        snapshot = self._prepare(records)
        items = apply_view(snapshot, filters, sort)
        logger.debug("Filtered %d records down to %d", len(snapshot), len(items))
        return items

    def export(self, records: Iterable[AnalysisRecord], fmt: str) -> ExportPayload:
        snapshot = self._prepare(records)
        payload = serialize_records(snapshot, fmt)
        logger.debug(
            "Exported %d records as %s (%d bytes)",
            len(snapshot),
            payload.media_type,
            payload.size_bytes,
        )
        return payload

    def progress(
        self,
        records: Iterable[AnalysisRecord],
        limit: int = PROGRESSION_LIMIT,
    ) -> Dict[str, list]:
        snapshot = self._prepare(records)
        return {
            "points": score_progression(snapshot, limit=limit),
            "skills": skill_comparison(snapshot),
        }

    def entry_report(self, record: AnalysisRecord) -> ExportPayload:
        return build_entry_report(record)
