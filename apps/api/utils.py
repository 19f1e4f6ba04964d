import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import HTTPException

from packages.config import DEFAULT_DAYS_BACK
from services.analytics.models import ReportingWindow

logger = logging.getLogger("strava_stats.api")


def parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_window(start: Optional[str], end: Optional[str]) -> ReportingWindow:
    """Window from start_date/end_date query params.

    Both must be present and valid to take effect; anything else falls back to
    the default look-back. A reversed range is rejected.
    """
    if not start or not end:
        return ReportingWindow(days_back=DEFAULT_DAYS_BACK)
    start_day, end_day = parse_day(start), parse_day(end)
    if start_day is None or end_day is None:
        logger.warning("invalid date range start=%r end=%r, using default window", start, end)
        return ReportingWindow(days_back=DEFAULT_DAYS_BACK)
    if start_day > end_day:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return ReportingWindow(start_date=start_day, end_date=end_day)


def window_cache_key(athlete_id: str, window: ReportingWindow) -> str:
    if window.is_explicit:
        return f"{athlete_id}:{window.start_date.isoformat()}-{window.end_date.isoformat()}"
    return f"{athlete_id}:default"


def fetch_after_epoch(window: ReportingWindow, today: Optional[date] = None) -> int:
    """Lower bound for the Strava query: one day before the window start.

    The extra day covers athletes whose local date runs ahead of UTC.
    """
    start, _ = window.resolve(today)
    day_before = start - timedelta(days=1)
    return int(datetime.combine(day_before, time.min, tzinfo=timezone.utc).timestamp())
