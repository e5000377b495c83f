"""Chart series for score progression and skill-by-skill comparison."""

from __future__ import annotations

from typing import Iterable, List

from ..history.models import AnalysisRecord, ChartDataPoint, SkillComparison
from .history_metrics_service import complete_by_recency

PROGRESSION_LIMIT = 10


def _chart_label(record: AnalysisRecord) -> str:
    moment = record.completed_at
    return f"{moment:%b} {moment.day}"


def score_progression(
    records: Iterable[AnalysisRecord],
    limit: int = PROGRESSION_LIMIT,
) -> List[ChartDataPoint]:
    """Latest ``limit`` complete records, oldest first."""
    if limit <= 0:
        return []
    recent = complete_by_recency(records)[:limit]
    return [
        ChartDataPoint(
            label=_chart_label(record),
            completed_at=record.completed_at,
            overall_score=record.overall_score,
            github_score=record.github_score,
            leetcode_score=record.leetcode_score,
        )
        for record in reversed(recent)
    ]


def skill_comparison(records: Iterable[AnalysisRecord]) -> List[SkillComparison]:
    """Compare the latest complete record's skills with the one before it.

    Skills missing from the previous record (or a missing previous record)
    count as 0. Skills only present in the previous record are dropped.
    """
    ordered = complete_by_recency(records)
    if not ordered:
        return []
    latest = ordered[0]
    previous = ordered[1].skill_scores if len(ordered) > 1 else {}

    rows: List[SkillComparison] = []
    for skill, current in latest.skill_scores.items():
        before = previous.get(skill, 0)
        rows.append(
            SkillComparison(
                skill_name=skill,
                current_score=current,
                previous_score=before,
                change=current - before,
            )
        )
    return rows
