"""
History Filter Service Module

Filters and orders analysis records for the history table. Predicates are
AND-combined; sorting is stable so equal keys keep their input order.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from ..history.models import (
    STATUS_ALL,
    AnalysisRecord,
    AnalysisStatus,
    FilterOptions,
    SortOptions,
)

Predicate = Callable[[AnalysisRecord], bool]


def _matches_query(record: AnalysisRecord, query: str) -> bool:
    if record.usernames is not None:
        if query in record.usernames.github.lower() or query in record.usernames.leetcode.lower():
            return True
    return any(query in achievement.lower() for achievement in record.achievements)


def build_predicates(filters: FilterOptions) -> List[Predicate]:
    """Build the active predicates, in evaluation order."""
    predicates: List[Predicate] = []

    if filters.date_range is not None:
        predicates.append(lambda r, d=filters.date_range: d.contains(r.completed_at))

    status = filters.status.value if isinstance(filters.status, AnalysisStatus) else filters.status
    if status != STATUS_ALL:
        predicates.append(lambda r, s=AnalysisStatus(status): r.status is s)

    # The score range always applies, including for non-complete records.
    predicates.append(
        lambda r, lo=filters.min_score, hi=filters.max_score: lo <= r.overall_score <= hi
    )

    if filters.search_query:
        predicates.append(lambda r, q=filters.search_query.lower(): _matches_query(r, q))

    return predicates


def filter_records(
    records: Iterable[AnalysisRecord],
    filters: FilterOptions,
) -> List[AnalysisRecord]:
    filters.validate()
    predicates = build_predicates(filters)
    return [record for record in records if all(pred(record) for pred in predicates)]


def _sort_key(field: str) -> Callable[[AnalysisRecord], Any]:
    if field == "status":
        return lambda record: record.status.value
    return lambda record: getattr(record, field)


def sort_records(
    records: Iterable[AnalysisRecord],
    sort: SortOptions,
) -> List[AnalysisRecord]:
    sort.validate()
    # sorted() keeps ties in input order for reverse=True as well.
    return sorted(records, key=_sort_key(sort.field), reverse=sort.direction == "desc")


def apply_view(
    records: Iterable[AnalysisRecord],
    filters: Optional[FilterOptions] = None,
    sort: Optional[SortOptions] = None,
) -> List[AnalysisRecord]:
    """Filter then sort ``records`` without touching the input collection.

    Both option objects are validated before any record is looked at, so an
    invalid sort is reported even when the filter leaves nothing behind.
    """
    filters = filters or FilterOptions()
    sort = sort or SortOptions()
    filters.validate()
    sort.validate()
    return sort_records(filter_records(records, filters), sort)
