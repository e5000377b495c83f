"""Tests for history_metrics_service module."""

import random
from datetime import timedelta

import pytest

from backend.src.history.models import AnalysisStatus, MetricsSnapshot
from backend.src.services.history_metrics_service import (
    complete_by_recency,
    compute_metrics,
    round_half_up,
)


class TestComputeMetrics:
    """Test suite for compute_metrics."""

    # =========================================================================
    # Empty / degenerate input
    # =========================================================================

    def test_empty_collection_returns_zero_snapshot(self, now):
        assert compute_metrics([], now=now) == MetricsSnapshot.empty()

    def test_only_non_complete_records_returns_zero_snapshot(self, make_record, now):
        records = [
            make_record("a", status=AnalysisStatus.FAILED, overall=0),
            make_record("b", status=AnalysisStatus.IN_PROGRESS, overall=0),
        ]
        assert compute_metrics(records, now=now) == MetricsSnapshot.empty()

    # =========================================================================
    # Totals and averages
    # =========================================================================

    def test_average_ignores_non_complete_records(self, make_record, now):
        records = [
            make_record("a", days_ago=1, overall=80),
            make_record("b", days_ago=2, overall=60),
            make_record("c", days_ago=3, overall=0, status=AnalysisStatus.FAILED),
        ]
        snapshot = compute_metrics(records, now=now)

        assert snapshot.total_complete == 2
        assert snapshot.average_score == 70

    def test_average_rounds_half_up(self, make_record, now):
        records = [make_record("a", overall=2), make_record("b", days_ago=1, overall=3)]
        assert compute_metrics(records, now=now).average_score == 3

    def test_result_independent_of_input_order(self, make_record, now):
        records = [
            make_record(f"r{i}", days_ago=i * 3, overall=score)
            for i, score in enumerate([91, 67, 74, 88, 59, 63, 95, 70, 81, 77, 66])
        ]
        expected = compute_metrics(records, now=now)

        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        assert compute_metrics(shuffled, now=now) == expected
        assert compute_metrics(list(reversed(records)), now=now) == expected

    def test_latest_completed_at_is_most_recent_complete(self, make_record, now):
        records = [
            make_record("old", days_ago=10),
            make_record("new", days_ago=2),
            make_record("failed", days_ago=0, status=AnalysisStatus.FAILED),
        ]
        snapshot = compute_metrics(records, now=now)
        assert snapshot.latest_completed_at == now - timedelta(days=2)

    # =========================================================================
    # Trend
    # =========================================================================

    def test_trend_recent_window_against_previous(self, make_record, now):
        scores = [90, 80, 70, 60, 50, 40]
        records = [make_record(f"r{i}", days_ago=i, overall=s) for i, s in enumerate(scores)]
        assert compute_metrics(records, now=now).trend_percent == 75

    def test_trend_zero_without_previous_window(self, make_record, now):
        records = [make_record(f"r{i}", days_ago=i, overall=50 + i) for i in range(5)]
        assert compute_metrics(records, now=now).trend_percent == 0

    def test_trend_zero_when_previous_mean_is_zero(self, make_record, now):
        scores = [80, 80, 80, 80, 80, 0, 0]
        records = [make_record(f"r{i}", days_ago=i, overall=s) for i, s in enumerate(scores)]
        assert compute_metrics(records, now=now).trend_percent == 0

    def test_trend_uses_only_ten_most_recent(self, make_record, now):
        scores = [60] * 5 + [50] * 5 + [1] * 5
        records = [make_record(f"r{i:02d}", days_ago=i, overall=s) for i, s in enumerate(scores)]
        assert compute_metrics(records, now=now).trend_percent == 20

    def test_trend_can_be_negative(self, make_record, now):
        scores = [40, 40, 40, 40, 40, 80]
        records = [make_record(f"r{i}", days_ago=i, overall=s) for i, s in enumerate(scores)]
        assert compute_metrics(records, now=now).trend_percent == -50

    # =========================================================================
    # Streak
    # =========================================================================

    def test_streak_over_consecutive_weeks(self, make_record, now):
        records = [make_record(f"w{d}", days_ago=d) for d in (0, 7, 14, 21)]
        assert compute_metrics(records, now=now).current_streak == 4

    def test_streak_broken_by_skipped_week(self, make_record, now):
        records = [make_record(f"w{d}", days_ago=d) for d in (0, 7, 14, 21, 36)]
        assert compute_metrics(records, now=now).current_streak == 4

    def test_record_thirty_days_back_lands_in_week_four(self, make_record, now):
        # floor(30 / 7) == 4 matches rank 4, so the walk keeps counting.
        records = [make_record(f"w{d}", days_ago=d) for d in (0, 7, 14, 21, 30)]
        assert compute_metrics(records, now=now).current_streak == 5

    def test_streak_zero_without_record_this_week(self, make_record, now):
        records = [make_record(f"w{d}", days_ago=d) for d in (7, 14, 21)]
        assert compute_metrics(records, now=now).current_streak == 0

    def test_adding_record_this_week_starts_the_walk(self, make_record, now):
        records = [make_record(f"w{d}", days_ago=d) for d in (7, 14)]
        assert compute_metrics(records, now=now).current_streak == 0

        records.append(make_record("today", days_ago=0))
        assert compute_metrics(records, now=now).current_streak == 3

    def test_two_records_in_same_week_stop_the_walk(self, make_record, now):
        records = [make_record("a", days_ago=1), make_record("b", days_ago=2)]
        assert compute_metrics(records, now=now).current_streak == 1

    def test_failed_records_do_not_count_towards_streak(self, make_record, now):
        records = [
            make_record("today", days_ago=0, status=AnalysisStatus.FAILED),
            make_record("last-week", days_ago=7),
        ]
        assert compute_metrics(records, now=now).current_streak == 0


def test_complete_by_recency_breaks_ties_by_id(make_record):
    records = [make_record("b"), make_record("a"), make_record("c", days_ago=1)]
    assert [r.id for r in complete_by_recency(records)] == ["a", "b", "c"]


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (-0.5, 0), (-1.5, -1), (74.4, 74)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
