"""Daily / weekly / monthly trend series with daily distance smoothing."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from .classify import filter_running
from .models import NormalizedActivity, TrendDataPoint, TrendSeries
from .units import meters_to_miles, pace_strings

SMOOTHING_WINDOW = 3


class TrendPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def week_start_iso(day: date) -> str:
    monday = day - timedelta(days=day.isoweekday() - 1)
    return monday.isoformat()


def month_start_iso(day: date) -> str:
    return day.replace(day=1).isoformat()


def period_key(day: date, period: TrendPeriod) -> str:
    if period is TrendPeriod.WEEKLY:
        return week_start_iso(day)
    if period is TrendPeriod.MONTHLY:
        return month_start_iso(day)
    return day.isoformat()


def _bucket_point(key: str, bucket: List[NormalizedActivity]) -> TrendDataPoint:
    distance = sum(a.distance for a in bucket)
    moving = sum(a.moving_time for a in bucket)
    pace, pace_km = pace_strings(distance, moving)
    return TrendDataPoint(
        date=key,
        distance=distance,
        distance_miles=meters_to_miles(distance),
        moving_time=moving,
        count=len(bucket),
        pace=pace,
        pace_min_per_km=pace_km,
    )


def centered_mean(values: List[float], window: int = SMOOTHING_WINDOW) -> List[Optional[float]]:
    """Centered moving average clamped at the ends.

    Zero values add nothing to the sum and are not counted in the denominator;
    a window with no non-zero value yields None.
    """
    n = len(values)
    half = window // 2
    out: List[Optional[float]] = []
    for i in range(n):
        window_vals = values[max(0, i - half):min(n, i + half + 1)]
        nonzero = sum(1 for v in window_vals if v > 0)
        out.append(sum(window_vals) / nonzero if nonzero else None)
    return out


def smooth_distances(points: List[TrendDataPoint]) -> List[TrendDataPoint]:
    # Pace stays as aggregated per bucket.
    smoothed = centered_mean([p.distance for p in points])
    out: List[TrendDataPoint] = []
    for point, value in zip(points, smoothed):
        if value is None:
            out.append(point)
        else:
            out.append(replace(point, distance=value, distance_miles=meters_to_miles(value)))
    return out


def compute_trends(
    activities: Iterable[NormalizedActivity],
    period: Union[TrendPeriod, str] = TrendPeriod.DAILY,
    running_only: bool = False,
) -> TrendSeries:
    period = TrendPeriod(period)
    selected = filter_running(activities) if running_only else list(activities)

    groups: Dict[str, List[NormalizedActivity]] = defaultdict(list)
    for activity in selected:
        if activity.local_date is None:
            continue
        groups[period_key(activity.local_date, period)].append(activity)

    points = [_bucket_point(key, groups[key]) for key in sorted(groups)]
    if period is TrendPeriod.DAILY and len(points) > 1:
        points = smooth_distances(points)
    return TrendSeries(period=period.value, points=points)
