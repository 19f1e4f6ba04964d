"""Unit conversions, calendar-date extraction and display formatting."""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Tuple, Union

METERS_PER_KM = 1000.0
METERS_PER_MILE = 1609.34
MPS_TO_KMH = 3.6
MPS_TO_MPH = 2.23694
METERS_TO_FEET = 3.28084


def meters_to_km(meters: float) -> float:
    return meters / METERS_PER_KM


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def mps_to_kmh(speed: float) -> float:
    return speed * MPS_TO_KMH


def mps_to_mph(speed: float) -> float:
    return speed * MPS_TO_MPH


def seconds_to_hours(seconds: float) -> float:
    return seconds / 3600.0


def _round_half_up(value: float) -> int:
    # Half away from zero for the non-negative values we format.
    return int(math.floor(value + 0.5))


def parse_local_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse Strava's start_date_local as naive wall-clock time.

    The trailing "Z" (or any offset) on start_date_local is not a real UTC
    marker, so it is dropped instead of converted.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    return parsed.replace(tzinfo=None)


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None


def truncate_to_calendar_date(value: Union[datetime, date]) -> date:
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    return value


def to_local_date(timestamp: datetime, timezone_label: Optional[str] = None) -> date:
    """Calendar date an activity is attributed to.

    The local timestamp's own year/month/day are authoritative; the timezone
    label is never used to re-project it.
    """
    return truncate_to_calendar_date(timestamp)


def format_duration(seconds: int) -> str:
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_pace(seconds_per_unit: float) -> str:
    total = _round_half_up(seconds_per_unit)
    minutes, seconds = divmod(total, 60)
    return f"{minutes}:{seconds:02d}"


def pace_strings(distance_m: float, moving_time_s: float) -> Tuple[Optional[str], Optional[str]]:
    """Weighted pace (min/mi, min/km) from aggregate distance and time."""
    if distance_m <= 0 or moving_time_s <= 0:
        return None, None
    sec_per_meter = moving_time_s / distance_m
    return format_pace(sec_per_meter * METERS_PER_MILE), format_pace(sec_per_meter * METERS_PER_KM)


def _one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def format_range_miles(start_m: float, end_m: float) -> str:
    start = _one_decimal(meters_to_miles(start_m))
    end = _one_decimal(meters_to_miles(end_m))
    return f"{start:.1f}-{end:.1f} mi"


def format_range_km(start_m: float, end_m: float) -> str:
    start = _one_decimal(meters_to_km(start_m))
    end = _one_decimal(meters_to_km(end_m))
    return f"{start:.1f}-{end:.1f} km"
