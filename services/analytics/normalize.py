"""Window filtering and unit normalization of raw activities."""
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from .models import NormalizedActivity, RawActivity, ReportingWindow
from .units import (
    format_duration,
    meters_to_feet,
    meters_to_km,
    meters_to_miles,
    mps_to_kmh,
    mps_to_mph,
    seconds_to_hours,
    to_local_date,
)


def normalize_activity(activity: RawActivity, local_date: date) -> NormalizedActivity:
    return NormalizedActivity(
        **activity.raw_fields(),
        local_date=local_date,
        local_date_key=local_date.isoformat(),
        distance_km=meters_to_km(activity.distance),
        distance_miles=meters_to_miles(activity.distance),
        moving_time_hours=seconds_to_hours(activity.moving_time),
        moving_time_formatted=format_duration(activity.moving_time),
        elevation_gain_meters=activity.total_elevation_gain,
        elevation_gain_feet=meters_to_feet(activity.total_elevation_gain),
        average_speed_kmh=mps_to_kmh(activity.average_speed),
        average_speed_mph=mps_to_mph(activity.average_speed),
        max_speed_kmh=mps_to_kmh(activity.max_speed),
        max_speed_mph=mps_to_mph(activity.max_speed),
    )


def normalize_activities(
    activities: Iterable[RawActivity],
    window: Optional[ReportingWindow] = None,
    today: Optional[date] = None,
) -> List[NormalizedActivity]:
    """Keep activities whose local date is inside the window, in input order.

    Activities without a usable start_date_local are skipped.
    """
    start, end = (window or ReportingWindow()).resolve(today)
    out: List[NormalizedActivity] = []
    for activity in activities:
        if activity.start_date_local is None:
            continue
        local_date = to_local_date(activity.start_date_local, activity.timezone)
        if local_date < start or local_date > end:
            continue
        out.append(normalize_activity(activity, local_date))
    return out
