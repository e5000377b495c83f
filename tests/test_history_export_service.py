"""Tests for history_export_service module."""

import json
from datetime import datetime, timezone

import pytest

from backend.src.history.errors import InvalidRecordError, UnsupportedExportFormatError
from backend.src.history.models import AnalysisRecord, AnalysisStatus, Usernames
from backend.src.services.history_export_service import (
    CSV_HEADERS,
    build_entry_report,
    parse_records_json,
    records_to_csv,
    serialize_records,
)

HEADER_LINE = (
    "ID,Date,Overall Score,GitHub Score,LeetCode Score,Status,"
    "GitHub Username,LeetCode Username,Duration (s),Achievements"
)


@pytest.fixture
def sample_records():
    return [
        AnalysisRecord(
            id="analysis-1",
            completed_at=datetime(2025, 3, 7, 15, 0, tzinfo=timezone.utc),
            overall_score=82,
            github_score=75,
            leetcode_score=68,
            status=AnalysisStatus.COMPLETE,
            skill_scores={"Problem Solving": 80, "Code Quality": 77},
            achievements=["GitHub Expert", "Problem Solver"],
            usernames=Usernames(github="octocat", leetcode="leetfan"),
            duration_seconds=45,
            report_url="/reports/analysis-1.pdf",
        ),
        AnalysisRecord(
            id="analysis-2",
            completed_at=datetime(2025, 11, 21, 8, 30, tzinfo=timezone.utc),
            overall_score=0,
            github_score=0,
            leetcode_score=0,
            status=AnalysisStatus.FAILED,
        ),
    ]


class TestCsvExport:
    def test_header_only_for_empty_collection(self):
        payload = serialize_records([], "csv")
        assert payload.content.decode("utf-8") == HEADER_LINE
        assert payload.media_type == "text/csv"
        assert payload.filename == "analysis-history.csv"

    def test_rows_follow_fixed_column_order(self, sample_records):
        lines = records_to_csv(sample_records).split("\n")

        assert lines[0] == HEADER_LINE
        assert lines[1] == (
            "analysis-1,3/7/2025,82,75,68,complete,octocat,leetfan,45,"
            "GitHub Expert; Problem Solver"
        )
        assert lines[2] == "analysis-2,11/21/2025,0,0,0,failed,,,,"
        assert len(lines) == 3

    def test_zero_duration_is_written(self, make_record):
        line = records_to_csv([make_record("a", duration_seconds=0)]).split("\n")[1]
        assert line.split(",")[8] == "0"

    def test_commas_in_achievements_are_not_quoted(self, make_record):
        line = records_to_csv([make_record("a", achievements=["Fast, Accurate"])]).split("\n")[1]
        assert line.endswith(",Fast, Accurate")
        assert len(line.split(",")) == len(CSV_HEADERS) + 1


class TestJsonExport:
    def test_empty_collection(self):
        payload = serialize_records([], "json")
        assert json.loads(payload.content) == []
        assert payload.media_type == "application/json"
        assert payload.filename == "analysis-history.json"

    def test_field_names_and_pretty_printing(self, sample_records):
        text = serialize_records(sample_records, "json").content.decode("utf-8")
        data = json.loads(text)

        assert "\n  {" in text
        assert set(data[0]) == {
            "id",
            "completed_at",
            "overall_score",
            "github_score",
            "leetcode_score",
            "status",
            "skill_scores",
            "achievements",
            "usernames",
            "duration_seconds",
            "report_url",
        }
        assert data[0]["achievements"] == ["GitHub Expert", "Problem Solver"]
        assert data[1]["usernames"] is None
        assert data[1]["duration_seconds"] is None

    def test_round_trip(self, sample_records):
        payload = serialize_records(sample_records, "json")
        assert parse_records_json(payload.content) == sample_records

    def test_round_trip_empty(self):
        assert parse_records_json(serialize_records([], "json").content) == []

    def test_parse_rejects_non_array(self):
        with pytest.raises(InvalidRecordError):
            parse_records_json('{"id": "x"}')

    def test_parse_rejects_invalid_json(self):
        with pytest.raises(InvalidRecordError):
            parse_records_json("not json")

    def test_parse_rejects_non_object_items(self):
        with pytest.raises(InvalidRecordError, match="Record must be an object"):
            parse_records_json("[1]")

    def test_parse_rejects_string_achievements(self, sample_records):
        data = json.loads(serialize_records(sample_records[:1], "json").content)
        data[0]["achievements"] = "GitHub Expert"
        with pytest.raises(InvalidRecordError):
            parse_records_json(json.dumps(data))

    def test_parse_rejects_null_handle(self, sample_records):
        data = json.loads(serialize_records(sample_records[:1], "json").content)
        data[0]["usernames"]["github"] = None
        with pytest.raises(InvalidRecordError):
            parse_records_json(json.dumps(data))


class TestFormatSelection:
    @pytest.mark.parametrize("fmt", [" CSV ", "Json"])
    def test_format_names_are_normalised(self, fmt):
        serialize_records([], fmt)

    @pytest.mark.parametrize("fmt", ["xml", "pdf", ""])
    def test_unsupported_format(self, fmt):
        with pytest.raises(UnsupportedExportFormatError) as exc_info:
            serialize_records([], fmt)
        assert exc_info.value.code == "unsupported_format"


def test_entry_report(sample_records):
    payload = build_entry_report(sample_records[0])
    report = json.loads(payload.content)

    assert payload.filename == "analysis-report-analysis-1.json"
    assert payload.media_type == "application/json"
    assert report["scores"] == {"overall": 82, "github": 75, "leetcode": 68}
    assert report["skills"] == {"Code Quality": 77, "Problem Solving": 80}
    assert report["usernames"] == {"github": "octocat", "leetcode": "leetfan"}
    assert report["achievements"] == ["GitHub Expert", "Problem Solver"]
