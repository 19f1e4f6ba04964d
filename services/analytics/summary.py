from __future__ import annotations

from datetime import date
from typing import List, Optional

from .models import ActivitySummary, NormalizedActivity, ReportingWindow
from .units import format_duration


def short_date(day: date) -> str:
    return f"{day:%b} {day.day}"


def summarize_activities(
    activities: List[NormalizedActivity],
    window: Optional[ReportingWindow] = None,
) -> ActivitySummary:
    """Header block for an activity listing.

    An explicit window is echoed back as the range; otherwise the range spans
    the earliest and latest activity dates present.
    """
    total_moving = sum(a.moving_time for a in activities)
    if window is not None and window.is_explicit:
        start, end = window.start_date, window.end_date
    else:
        days = sorted(a.local_date for a in activities if a.local_date is not None)
        start, end = (days[0], days[-1]) if days else (None, None)

    if start is None or end is None:
        label, start_key, end_key = "No activities", "", ""
    else:
        label = f"{short_date(start)} - {short_date(end)}"
        start_key, end_key = start.isoformat(), end.isoformat()

    return ActivitySummary(
        date_range=label,
        start_date=start_key,
        end_date=end_key,
        total_activities=len(activities),
        total_moving_time=format_duration(total_moving),
        activities=list(activities),
    )
