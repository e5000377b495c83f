#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.src.config.settings import load_settings
from backend.src.history.errors import HistoryError, InvalidRecordError, InvalidSpecError
from backend.src.history.models import DateRange, FilterOptions, SortOptions, parse_datetime
from backend.src.services.history_export_service import parse_records_json
from backend.src.services.history_service import HistoryService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise, filter and export an analysis history JSON file."
    )
    parser.add_argument("source", help="Path to a JSON export of analysis records")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the metrics snapshot as JSON instead of human-readable text.",
    )
    parser.add_argument("--status", default="all", help="all, complete, in-progress or failed")
    parser.add_argument("--min-score", type=int, default=0)
    parser.add_argument("--max-score", type=int, default=100)
    parser.add_argument("--search", default="", help="Match usernames or achievements")
    parser.add_argument("--since", help="Only records completed at or after this ISO date")
    parser.add_argument("--until", help="Only records completed at or before this ISO date")
    parser.add_argument("--sort-field", default="completed_at")
    parser.add_argument("--direction", choices=("asc", "desc"), default="desc")
    parser.add_argument("--export", help="Write the filtered records as csv or json")
    parser.add_argument("--output", help="Export destination (defaults to the download name)")
    return parser


def _date_range(since: Optional[str], until: Optional[str]) -> Optional[DateRange]:
    if not since and not until:
        return None
    try:
        start = parse_datetime(since) if since else datetime.min
        end = parse_datetime(until) if until else datetime.max
    except InvalidRecordError as exc:
        raise InvalidSpecError(f"Invalid --since/--until value: {exc}") from exc
    return DateRange(start=start, end=end)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=load_settings().log_level)

    service = HistoryService()
    try:
        records = parse_records_json(Path(args.source).read_text(encoding="utf-8"))
        filters = FilterOptions(
            date_range=_date_range(args.since, args.until),
            status=args.status,
            min_score=args.min_score,
            max_score=args.max_score,
            search_query=args.search,
        )
        view = service.view(records, filters, SortOptions(args.sort_field, args.direction))
        metrics = service.metrics(records)
        payload = service.export(view, args.export) if args.export else None
    except HistoryError as exc:
        print(f"History error ({exc.code}): {exc}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(metrics.to_dict(), indent=2))
    else:
        latest = metrics.latest_completed_at
        print(f"Records: {len(view)} of {len(records)}")
        print(f"Complete analyses: {metrics.total_complete}")
        print(f"Average score: {metrics.average_score}")
        print(f"Trend: {metrics.trend_percent:+d}%")
        print(f"Latest analysis: {latest.date().isoformat() if latest else '-'}")
        print(f"Current streak: {metrics.current_streak} week(s)")

    if payload is not None:
        destination = Path(args.output or payload.filename)
        destination.write_bytes(payload.content)
        logger.info("Wrote %s (%d bytes)", destination, payload.size_bytes)
        if not args.json:
            print(f"Exported {len(view)} records to {destination}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
