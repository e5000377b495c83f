"""
Pytest configuration and fixtures
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.src.history.models import AnalysisRecord, AnalysisStatus, Usernames


FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Fixture providing path to project root"""
    return PROJECT_ROOT


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used as the metrics clock."""
    return FIXED_NOW


@pytest.fixture
def make_record():
    """Factory for records dated a number of days before ``FIXED_NOW``."""

    def _make(
        record_id,
        days_ago=0,
        overall=70,
        github=60,
        leetcode=50,
        status=AnalysisStatus.COMPLETE,
        **extra,
    ):
        extra.setdefault("usernames", Usernames(github=f"gh-{record_id}", leetcode=f"lc-{record_id}"))
        return AnalysisRecord(
            id=record_id,
            completed_at=FIXED_NOW - timedelta(days=days_ago),
            overall_score=overall,
            github_score=github,
            leetcode_score=leetcode,
            status=status,
            **extra,
        )

    return _make
