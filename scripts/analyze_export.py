import argparse
import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.config import DEFAULT_DAYS_BACK
from services.analytics.engine import (
    ReportingWindow,
    compute_personal_records,
    compute_running_stats,
    compute_trends,
    generate_histogram,
    normalize_activities,
    summarize_activities,
)
from services.ingestion.strava_api import parse_activities


def _day(value: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def build_window(args) -> ReportingWindow:
    if args.start or args.end:
        if not (args.start and args.end):
            raise SystemExit("--start and --end must be given together")
        if args.start > args.end:
            raise SystemExit("--start must not be after --end")
        return ReportingWindow(start_date=args.start, end_date=args.end)
    return ReportingWindow(days_back=args.days_back)


def build_report(payload, window: ReportingWindow, period: str, use_miles: bool, running_only: bool) -> dict:
    normalized = normalize_activities(parse_activities(payload), window)
    summary = summarize_activities(normalized, window)
    return {
        "summary": {k: v for k, v in asdict(summary).items() if k != "activities"},
        "stats": asdict(compute_running_stats(normalized)),
        "prs": asdict(compute_personal_records(normalized)),
        "histogram": asdict(generate_histogram(normalized, use_miles=use_miles)),
        "trends": asdict(compute_trends(normalized, period, running_only)),
    }


def main() -> None:
    p = argparse.ArgumentParser(description="Summarize a JSON export of Strava activities.")
    p.add_argument("export", help="JSON file holding a list of Strava activity objects")
    p.add_argument("--days-back", type=int, default=DEFAULT_DAYS_BACK)
    p.add_argument("--start", type=_day, default=None)
    p.add_argument("--end", type=_day, default=None)
    p.add_argument("--period", choices=["daily", "weekly", "monthly"], default="daily")
    p.add_argument("--km", action="store_true", help="Histogram bins in kilometers")
    p.add_argument("--running-only", action="store_true")
    args = p.parse_args()

    path = Path(args.export).expanduser()
    if not path.exists():
        raise SystemExit(f"Export not found: {path}")
    with path.open() as f:
        payload = json.load(f)

    report = build_report(payload, build_window(args), args.period, not args.km, args.running_only)
    print(json.dumps(report, indent=2, default=str))


if __name__ == "__main__":
    main()
