"""Value types shared by the analytics engine."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from .units import parse_instant, parse_local_timestamp

DEFAULT_DAYS_BACK = 7


def _float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class RawActivity:
    id: int
    name: str = ""
    sport_type: str = ""
    start_date: Optional[datetime] = None
    start_date_local: Optional[datetime] = None
    timezone: Optional[str] = None
    moving_time: int = 0
    elapsed_time: int = 0
    distance: float = 0.0
    total_elevation_gain: float = 0.0
    average_speed: float = 0.0
    max_speed: float = 0.0
    average_cadence: Optional[float] = None
    average_watts: Optional[float] = None
    weighted_average_watts: Optional[float] = None
    kilojoules: Optional[float] = None
    has_heartrate: bool = False
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    elev_high: Optional[float] = None
    elev_low: Optional[float] = None
    workout_type: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RawActivity":
        """Build from a Strava activity JSON object.

        start_date is an absolute instant; start_date_local keeps the athlete's
        wall-clock components (see parse_local_timestamp).
        """
        return cls(
            id=_int(payload.get("id")),
            name=payload.get("name") or "",
            sport_type=payload.get("sport_type") or payload.get("type") or "",
            start_date=parse_instant(payload.get("start_date")),
            start_date_local=parse_local_timestamp(payload.get("start_date_local")),
            timezone=payload.get("timezone"),
            moving_time=_int(payload.get("moving_time")),
            elapsed_time=_int(payload.get("elapsed_time")),
            distance=_float(payload.get("distance")),
            total_elevation_gain=_float(payload.get("total_elevation_gain")),
            average_speed=_float(payload.get("average_speed")),
            max_speed=_float(payload.get("max_speed")),
            average_cadence=payload.get("average_cadence"),
            average_watts=payload.get("average_watts"),
            weighted_average_watts=payload.get("weighted_average_watts"),
            kilojoules=payload.get("kilojoules"),
            has_heartrate=bool(payload.get("has_heartrate")),
            average_heartrate=payload.get("average_heartrate"),
            max_heartrate=payload.get("max_heartrate"),
            elev_high=payload.get("elev_high"),
            elev_low=payload.get("elev_low"),
            workout_type=payload.get("workout_type"),
        )

    def raw_fields(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(RawActivity)}


@dataclass(frozen=True)
class NormalizedActivity(RawActivity):
    local_date: Optional[date] = None
    local_date_key: str = ""
    distance_km: float = 0.0
    distance_miles: float = 0.0
    moving_time_hours: float = 0.0
    moving_time_formatted: str = ""
    elevation_gain_meters: float = 0.0
    elevation_gain_feet: float = 0.0
    average_speed_kmh: float = 0.0
    average_speed_mph: float = 0.0
    max_speed_kmh: float = 0.0
    max_speed_mph: float = 0.0


@dataclass(frozen=True)
class ReportingWindow:
    days_back: int = DEFAULT_DAYS_BACK
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_explicit(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def resolve(self, today: Optional[date] = None) -> Tuple[date, date]:
        if self.is_explicit:
            return self.start_date, self.end_date
        days_back = self.days_back if self.days_back > 0 else DEFAULT_DAYS_BACK
        end = today or date.today()
        return end - timedelta(days=days_back), end


@dataclass(frozen=True)
class RunRecord:
    id: int
    name: str
    date: str
    distance: float
    distance_miles: float
    moving_time: int
    pace: Optional[str] = None
    pace_min_per_km: Optional[str] = None
    elevation_gain: float = 0.0
    elevation_gain_feet: float = 0.0


@dataclass
class RunningStats:
    total_runs: int = 0
    runs_over_10k: int = 0
    total_distance: float = 0.0
    total_distance_miles: float = 0.0
    average_pace: Optional[str] = None
    average_pace_min_per_km: Optional[str] = None


@dataclass
class PersonalRecords:
    fastest_mile: Optional[RunRecord] = None
    fastest_10k: Optional[RunRecord] = None
    longest_run: Optional[RunRecord] = None
    most_elevation: Optional[RunRecord] = None


@dataclass
class HistogramBin:
    range: str
    range_km: str
    count: int = 0
    distance: float = 0.0
    distance_miles: float = 0.0


@dataclass
class DistanceHistogram:
    bins: List[HistogramBin] = field(default_factory=list)


@dataclass(frozen=True)
class TrendDataPoint:
    date: str
    distance: float
    distance_miles: float
    moving_time: int
    count: int
    pace: Optional[str] = None
    pace_min_per_km: Optional[str] = None


@dataclass
class TrendSeries:
    period: str
    points: List[TrendDataPoint] = field(default_factory=list)


@dataclass
class ActivitySummary:
    date_range: str
    start_date: str = ""
    end_date: str = ""
    total_activities: int = 0
    total_moving_time: str = "0s"
    activities: List[NormalizedActivity] = field(default_factory=list)
