"""Summary metrics over a user's analysis history."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from ..history.models import AnalysisRecord, MetricsSnapshot, as_utc

TREND_WINDOW = 5
STREAK_PERIOD = timedelta(days=7)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


def complete_by_recency(records: Iterable[AnalysisRecord]) -> List[AnalysisRecord]:
    """Complete records, most recent first.

    Equal timestamps are ordered by id so the result does not depend on
    the order the collection was handed over in.
    """
    complete = [record for record in records if record.is_complete]
    complete.sort(key=lambda record: record.id)
    complete.sort(key=lambda record: record.completed_at, reverse=True)
    return complete


def trend_percent(ordered_complete: Sequence[AnalysisRecord]) -> int:
    recent = [r.overall_score for r in ordered_complete[:TREND_WINDOW]]
    previous = [r.overall_score for r in ordered_complete[TREND_WINDOW : TREND_WINDOW * 2]]
    if not recent or not previous:
        return 0
    previous_mean = _mean(previous)
    if previous_mean == 0:
        return 0
    return round_half_up((_mean(recent) - previous_mean) / previous_mean * 100)


def current_streak(ordered_complete: Sequence[AnalysisRecord], now: datetime) -> int:
    """Count leading records whose week offset from ``now`` equals their rank."""
    streak = 0
    for index, record in enumerate(ordered_complete):
        weeks_ago = math.floor((now - record.completed_at) / STREAK_PERIOD)
        if weeks_ago != index:
            break
        streak += 1
    return streak


def compute_metrics(
    records: Iterable[AnalysisRecord],
    now: Optional[datetime] = None,
) -> MetricsSnapshot:
    ordered = complete_by_recency(records)
    if not ordered:
        return MetricsSnapshot.empty()

    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return MetricsSnapshot(
        total_complete=len(ordered),
        average_score=round_half_up(_mean([r.overall_score for r in ordered])),
        trend_percent=trend_percent(ordered),
        latest_completed_at=ordered[0].completed_at,
        current_streak=current_streak(ordered, now),
    )
