"""
History Export Module

Serialises analysis records into downloadable CSV or JSON payloads.
Nothing here touches the file system; callers decide how to deliver the
bytes.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Iterable, List, Union

from ..history.errors import InvalidRecordError, UnsupportedExportFormatError
from ..history.models import AnalysisRecord, records_from_dicts

_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

CSV_MEDIA_TYPE = "text/csv"
JSON_MEDIA_TYPE = "application/json"
SUPPORTED_FORMATS = ("csv", "json")

CSV_HEADERS = (
    "ID",
    "Date",
    "Overall Score",
    "GitHub Score",
    "LeetCode Score",
    "Status",
    "GitHub Username",
    "LeetCode Username",
    "Duration (s)",
    "Achievements",
)


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class ExportPayload:
    """In-memory export tagged with its media type."""

    content: bytes
    media_type: str
    filename: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def normalize_format(fmt: str) -> str:
    normalized = (fmt or "").strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        raise UnsupportedExportFormatError(fmt)
    return normalized


def format_short_date(record: AnalysisRecord) -> str:
    # en-US short date, e.g. 3/7/2025
    moment = record.completed_at
    return f"{moment.month}/{moment.day}/{moment.year}"


def _csv_row(record: AnalysisRecord) -> List[str]:
    usernames = record.usernames
    return [
        record.id,
        format_short_date(record),
        str(record.overall_score),
        str(record.github_score),
        str(record.leetcode_score),
        record.status.value,
        usernames.github if usernames else "",
        usernames.leetcode if usernames else "",
        "" if record.duration_seconds is None else str(record.duration_seconds),
        "; ".join(record.achievements),
    ]


def records_to_csv(records: Iterable[AnalysisRecord]) -> str:
    """Render records as CSV text.

    Cells are joined verbatim: a comma inside an achievement label or a
    username is not quoted and will shift the columns of that row.
    """
    rows = [list(CSV_HEADERS)] + [_csv_row(record) for record in records]
    return "\n".join(",".join(row) for row in rows)


def records_to_json(records: Iterable[AnalysisRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def parse_records_json(data: Union[str, bytes]) -> List[AnalysisRecord]:
    """Read a JSON export back into records."""
    try:
        items: Any = json.loads(data)
    except ValueError as exc:
        raise InvalidRecordError(f"Export is not valid JSON: {exc}") from exc
    if not isinstance(items, list):
        raise InvalidRecordError("Export must be a JSON array of records")
    return records_from_dicts(items)


def serialize_records(records: Iterable[AnalysisRecord], fmt: str) -> ExportPayload:
    fmt = normalize_format(fmt)
    if fmt == "csv":
        text, media_type = records_to_csv(records), CSV_MEDIA_TYPE
    else:
        text, media_type = records_to_json(records), JSON_MEDIA_TYPE
    return ExportPayload(
        content=text.encode("utf-8"),
        media_type=media_type,
        filename=f"analysis-history.{fmt}",
    )


def build_entry_report(record: AnalysisRecord) -> ExportPayload:
    """Per-entry report download, as offered from the history table."""
    report = {
        "id": record.id,
        "completed_at": record.completed_at.isoformat(),
        "scores": {
            "overall": record.overall_score,
            "github": record.github_score,
            "leetcode": record.leetcode_score,
        },
        "skills": dict(record.skill_scores),
        "achievements": list(record.achievements),
        "usernames": record.usernames.to_dict() if record.usernames else None,
    }
    return ExportPayload(
        content=json.dumps(report, indent=2, ensure_ascii=False).encode("utf-8"),
        media_type=JSON_MEDIA_TYPE,
        filename=f"analysis-report-{record.id}.json",
    )
