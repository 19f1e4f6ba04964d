"""Running totals, weighted average pace and personal records."""
from __future__ import annotations

from typing import Iterable, Optional

from .classify import is_running_activity
from .models import NormalizedActivity, PersonalRecords, RunRecord, RunningStats
from .units import METERS_PER_MILE, meters_to_miles, pace_strings

TEN_K_METERS = 10000.0
MILE_TOLERANCE_M = 200.0
TEN_K_TOLERANCE_M = 500.0


def _within(distance: float, target: float, tolerance: float) -> bool:
    return target - tolerance <= distance <= target + tolerance


def run_record(activity: NormalizedActivity) -> RunRecord:
    pace, pace_km = pace_strings(activity.distance, activity.moving_time)
    return RunRecord(
        id=activity.id,
        name=activity.name,
        date=activity.local_date_key,
        distance=activity.distance,
        distance_miles=activity.distance_miles,
        moving_time=activity.moving_time,
        pace=pace,
        pace_min_per_km=pace_km,
        elevation_gain=activity.total_elevation_gain,
        elevation_gain_feet=activity.elevation_gain_feet,
    )


def compute_running_stats(activities: Iterable[NormalizedActivity]) -> RunningStats:
    stats = RunningStats()
    total_distance = 0.0
    total_moving = 0
    for activity in activities:
        if not is_running_activity(activity.sport_type):
            continue
        stats.total_runs += 1
        total_distance += activity.distance
        total_moving += activity.moving_time
        if activity.distance >= TEN_K_METERS:
            stats.runs_over_10k += 1

    stats.total_distance = total_distance
    stats.total_distance_miles = meters_to_miles(total_distance)
    # Pace from the totals, not a mean of per-run paces.
    stats.average_pace, stats.average_pace_min_per_km = pace_strings(total_distance, total_moving)
    return stats


def compute_personal_records(activities: Iterable[NormalizedActivity]) -> PersonalRecords:
    """Best efforts per category; ties keep the first activity seen."""
    prs = PersonalRecords()
    fastest_mile: Optional[int] = None
    fastest_10k: Optional[int] = None
    longest: Optional[float] = None
    most_elevation: Optional[float] = None

    for activity in activities:
        if not is_running_activity(activity.sport_type):
            continue

        if _within(activity.distance, METERS_PER_MILE, MILE_TOLERANCE_M):
            if fastest_mile is None or activity.moving_time < fastest_mile:
                fastest_mile = activity.moving_time
                prs.fastest_mile = run_record(activity)

        if _within(activity.distance, TEN_K_METERS, TEN_K_TOLERANCE_M):
            if fastest_10k is None or activity.moving_time < fastest_10k:
                fastest_10k = activity.moving_time
                prs.fastest_10k = run_record(activity)

        if longest is None or activity.distance > longest:
            longest = activity.distance
            prs.longest_run = run_record(activity)

        if most_elevation is None or activity.total_elevation_gain > most_elevation:
            most_elevation = activity.total_elevation_gain
            prs.most_elevation = run_record(activity)

    return prs
