"""Record model for analysis history.

An ``AnalysisRecord`` is one finished (or attempted) profile analysis run.
Records are immutable; the helpers in ``services`` only ever read them and
build new collections.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import InvalidRecordError, InvalidSpecError

_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

STATUS_ALL = "all"
SORT_FIELDS = ("completed_at", "overall_score", "github_score", "leetcode_score", "status")
SORT_DIRECTIONS = ("asc", "desc")


class AnalysisStatus(str, Enum):
    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"
    FAILED = "failed"


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRecordError(f"Invalid timestamp: {value!r}")
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError as exc:
        raise InvalidRecordError(f"Invalid timestamp: {value!r}") from exc
    return as_utc(parsed)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_score(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRecordError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class Usernames:
    github: str
    leetcode: str

    def __post_init__(self) -> None:
        for name in ("github", "leetcode"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise InvalidRecordError(f"usernames.{name} must be a string, got {value!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"github": self.github, "leetcode": self.leetcode}


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class AnalysisRecord:
    """A single analysis run.

    Scores are only meaningful when ``status`` is ``complete``; other
    statuses may carry placeholder zeros.  ``skill_scores`` is stored in
    skill-name order so every output derived from it is stable.
    """

    id: str
    completed_at: datetime
    overall_score: int
    github_score: int
    leetcode_score: int
    status: AnalysisStatus
    skill_scores: Dict[str, int] = field(default_factory=dict)
    achievements: Tuple[str, ...] = ()
    usernames: Optional[Usernames] = None
    duration_seconds: Optional[int] = None
    report_url: Optional[str] = None

    # skill_scores is a dict, so records compare by value but cannot be hashed.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidRecordError("Record id must not be empty")
        try:
            status = AnalysisStatus(self.status)
        except ValueError as exc:
            raise InvalidRecordError(f"Unknown status: {self.status!r}") from exc
        if not isinstance(self.completed_at, datetime):
            raise InvalidRecordError(f"completed_at must be a datetime, got {self.completed_at!r}")
        for name in ("overall_score", "github_score", "leetcode_score"):
            _check_score(name, getattr(self, name))
        if self.duration_seconds is not None:
            _check_score("duration_seconds", self.duration_seconds)
            if self.duration_seconds < 0:
                raise InvalidRecordError("duration_seconds must not be negative")
        if not isinstance(self.skill_scores, Mapping):
            raise InvalidRecordError(f"skill_scores must be a mapping, got {self.skill_scores!r}")
        for skill, score in self.skill_scores.items():
            if not isinstance(skill, str):
                raise InvalidRecordError(f"Skill names must be strings, got {skill!r}")
            _check_score(f"skill_scores[{skill!r}]", score)
        if isinstance(self.achievements, (str, bytes)) or not isinstance(
            self.achievements, (list, tuple)
        ):
            raise InvalidRecordError(f"achievements must be a list, got {self.achievements!r}")
        for achievement in self.achievements:
            if not isinstance(achievement, str):
                raise InvalidRecordError(f"Achievements must be strings, got {achievement!r}")
        if self.usernames is not None and not isinstance(self.usernames, Usernames):
            raise InvalidRecordError(f"usernames must be a Usernames value, got {self.usernames!r}")

        object.__setattr__(self, "status", status)
        object.__setattr__(self, "completed_at", as_utc(self.completed_at))
        object.__setattr__(self, "skill_scores", dict(sorted(self.skill_scores.items())))
        object.__setattr__(self, "achievements", tuple(self.achievements))

    @property
    def is_complete(self) -> bool:
        return self.status is AnalysisStatus.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "completed_at": self.completed_at.isoformat(),
            "overall_score": self.overall_score,
            "github_score": self.github_score,
            "leetcode_score": self.leetcode_score,
            "status": self.status.value,
            "skill_scores": dict(self.skill_scores),
            "achievements": list(self.achievements),
            "usernames": self.usernames.to_dict() if self.usernames else None,
            "duration_seconds": self.duration_seconds,
            "report_url": self.report_url,
        }

    # Rows decoded from JSON files carry no schema; every shape is checked here
    # so malformed input surfaces as InvalidRecordError.
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisRecord":
        if not isinstance(data, Mapping):
            raise InvalidRecordError(f"Record must be an object, got {data!r}")
        usernames = data.get("usernames")
        if usernames is not None and not isinstance(usernames, Mapping):
            raise InvalidRecordError(f"usernames must be an object, got {usernames!r}")
        skill_scores = data.get("skill_scores")
        if skill_scores is None:
            skill_scores = {}
        achievements = data.get("achievements")
        if achievements is None:
            achievements = ()
        try:
            return cls(
                id=str(data["id"]),
                completed_at=parse_datetime(data["completed_at"]),
                overall_score=data["overall_score"],
                github_score=data["github_score"],
                leetcode_score=data["leetcode_score"],
                status=data["status"],
                skill_scores=skill_scores,
                achievements=achievements,
                usernames=Usernames(usernames["github"], usernames["leetcode"]) if usernames else None,
                duration_seconds=data.get("duration_seconds"),
                report_url=data.get("report_url"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidRecordError(f"Malformed record: {exc}") from exc


def ensure_unique_ids(records: Iterable[AnalysisRecord]) -> None:
    seen = set()
    for record in records:
        if record.id in seen:
            raise InvalidRecordError(f"Duplicate record id: {record.id}")
        seen.add(record.id)


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class MetricsSnapshot:
    total_complete: int
    average_score: int
    trend_percent: int
    latest_completed_at: Optional[datetime]
    current_streak: int

    @classmethod
    def empty(cls) -> "MetricsSnapshot":
        return cls(
            total_complete=0,
            average_score=0,
            trend_percent=0,
            latest_completed_at=None,
            current_streak=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_complete": self.total_complete,
            "average_score": self.average_score,
            "trend_percent": self.trend_percent,
            "latest_completed_at": (
                self.latest_completed_at.isoformat() if self.latest_completed_at else None
            ),
            "current_streak": self.current_streak,
        }


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class DateRange:
    """Inclusive interval over ``completed_at``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", as_utc(self.start))
        object.__setattr__(self, "end", as_utc(self.end))

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class FilterOptions:
    date_range: Optional[DateRange] = None
    status: str = STATUS_ALL
    min_score: int = 0
    max_score: int = 100
    search_query: str = ""

    def validate(self) -> None:
        allowed = {STATUS_ALL, *(s.value for s in AnalysisStatus)}
        status = self.status.value if isinstance(self.status, AnalysisStatus) else self.status
        if status not in allowed:
            raise InvalidSpecError(f"Unknown status filter: {self.status!r}")
        if self.date_range is not None and self.date_range.start > self.date_range.end:
            raise InvalidSpecError("Date range start must not be after its end")
        for name in ("min_score", "max_score"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
                raise InvalidSpecError(f"{name} must be a number, got {value!r}")
        if self.min_score > self.max_score:
            raise InvalidSpecError("min_score must not exceed max_score")


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class SortOptions:
    field: str = "completed_at"
    direction: str = "desc"

    def validate(self) -> None:
        if self.field not in SORT_FIELDS:
            raise InvalidSpecError(
                f"Unknown sort field {self.field!r}; expected one of {', '.join(SORT_FIELDS)}"
            )
        if self.direction not in SORT_DIRECTIONS:
            raise InvalidSpecError(f"Unknown sort direction {self.direction!r}; expected asc or desc")


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class ChartDataPoint:
    label: str
    completed_at: datetime
    overall_score: int
    github_score: int
    leetcode_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "completed_at": self.completed_at.isoformat(),
            "overall_score": self.overall_score,
            "github_score": self.github_score,
            "leetcode_score": self.leetcode_score,
        }


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class SkillComparison:
    skill_name: str
    current_score: int
    previous_score: int
    change: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_name": self.skill_name,
            "current_score": self.current_score,
            "previous_score": self.previous_score,
            "change": self.change,
        }


def records_from_dicts(items: Sequence[Mapping[str, Any]]) -> List[AnalysisRecord]:
    return [AnalysisRecord.from_dict(item) for item in items]
