from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ...history.models import (
    AnalysisRecord,
    ChartDataPoint,
    DateRange,
    FilterOptions,
    MetricsSnapshot,
    SkillComparison,
    SortOptions,
    Usernames,
)


class UsernamesModel(BaseModel):
    github: str
    leetcode: str


class AnalysisRecordModel(BaseModel):
    id: str = Field(..., min_length=1)
    completed_at: datetime
    overall_score: int
    github_score: int
    leetcode_score: int
    status: Literal["complete", "in-progress", "failed"]
    skill_scores: Dict[str, int] = Field(default_factory=dict)
    achievements: List[str] = Field(default_factory=list)
    usernames: Optional[UsernamesModel] = None
    duration_seconds: Optional[int] = Field(None, ge=0)
    report_url: Optional[str] = None

    def to_record(self) -> AnalysisRecord:
        return AnalysisRecord(
            id=self.id,
            completed_at=self.completed_at,
            overall_score=self.overall_score,
            github_score=self.github_score,
            leetcode_score=self.leetcode_score,
            status=self.status,
            skill_scores=dict(self.skill_scores),
            achievements=tuple(self.achievements),
            usernames=(
                Usernames(self.usernames.github, self.usernames.leetcode) if self.usernames else None
            ),
            duration_seconds=self.duration_seconds,
            report_url=self.report_url,
        )

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "AnalysisRecordModel":
        return cls(**record.to_dict())


class DateRangeModel(BaseModel):
    start: datetime
    end: datetime


class FilterOptionsModel(BaseModel):
    date_range: Optional[DateRangeModel] = None
    status: str = "all"
    min_score: int = 0
    max_score: int = 100
    search_query: str = ""

    def to_options(self) -> FilterOptions:
        date_range = (
            DateRange(start=self.date_range.start, end=self.date_range.end)
            if self.date_range
            else None
        )
        return FilterOptions(
            date_range=date_range,
            status=self.status,
            min_score=self.min_score,
            max_score=self.max_score,
            search_query=self.search_query,
        )


class SortOptionsModel(BaseModel):
    field: str = "completed_at"
    direction: str = "desc"

    def to_options(self) -> SortOptions:
        return SortOptions(field=self.field, direction=self.direction)


class RecordsRequest(BaseModel):
    """Body shared by every history endpoint: the records to aggregate."""

    records: List[AnalysisRecordModel] = Field(default_factory=list)

    def to_records(self) -> List[AnalysisRecord]:
        return [item.to_record() for item in self.records]


class HistoryViewRequest(RecordsRequest):
    filters: FilterOptionsModel = Field(default_factory=FilterOptionsModel)
    sort: SortOptionsModel = Field(default_factory=SortOptionsModel)


class ProgressRequest(RecordsRequest):
    limit: int = Field(10, ge=1, le=100)


class MetricsResponse(BaseModel):
    total_complete: int
    average_score: int
    trend_percent: int
    latest_completed_at: Optional[datetime] = None
    current_streak: int

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> "MetricsResponse":
        return cls(
            total_complete=snapshot.total_complete,
            average_score=snapshot.average_score,
            trend_percent=snapshot.trend_percent,
            latest_completed_at=snapshot.latest_completed_at,
            current_streak=snapshot.current_streak,
        )


class HistoryViewResponse(BaseModel):
    items: List[AnalysisRecordModel]
    total: int


class ChartPointModel(BaseModel):
    label: str
    completed_at: datetime
    overall_score: int
    github_score: int
    leetcode_score: int

    @classmethod
    def from_point(cls, point: ChartDataPoint) -> "ChartPointModel":
        return cls(**point.to_dict())


class SkillComparisonModel(BaseModel):
    skill_name: str
    current_score: int
    previous_score: int
    change: int

    @classmethod
    def from_row(cls, row: SkillComparison) -> "SkillComparisonModel":
        return cls(**row.to_dict())


class ProgressResponse(BaseModel):
    points: List[ChartPointModel]
    skills: List[SkillComparisonModel]
