from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    run_mode: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None


class SessionResponse(BaseModel):
    authenticated: bool = False
    name: Optional[str] = None
    profile_url: Optional[str] = None


class ActivityOut(BaseModel):
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


class ActivitiesResponse(BaseModel):
    date_range: str = "No activities"
    start_date: str = ""
    end_date: str = ""
    total_activities: int = 0
    total_moving_time: str = "0s"
    activities: List[ActivityOut] = Field(default_factory=list)


class RunningStatsOut(BaseModel):
    total_runs: int = 0
    runs_over_10k: int = 0
    total_distance: float = 0.0
    total_distance_miles: float = 0.0
    average_pace: Optional[str] = None
    average_pace_min_per_km: Optional[str] = None


class RunRecordOut(BaseModel):
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


class PersonalRecordsOut(BaseModel):
    fastest_mile: Optional[RunRecordOut] = None
    fastest_10k: Optional[RunRecordOut] = None
    longest_run: Optional[RunRecordOut] = None
    most_elevation: Optional[RunRecordOut] = None


class HistogramBinOut(BaseModel):
    range: str
    range_km: str
    count: int = 0
    distance: float = 0.0
    distance_miles: float = 0.0


class HistogramOut(BaseModel):
    bins: List[HistogramBinOut] = Field(default_factory=list)


class RunningStatsResponse(BaseModel):
    stats: RunningStatsOut = Field(default_factory=RunningStatsOut)
    prs: PersonalRecordsOut = Field(default_factory=PersonalRecordsOut)
    histogram: HistogramOut = Field(default_factory=HistogramOut)


class TrendPointOut(BaseModel):
    date: str
    distance: float = 0.0
    distance_miles: float = 0.0
    moving_time: int = 0
    count: int = 0
    pace: Optional[str] = None
    pace_min_per_km: Optional[str] = None


class TrendSeriesOut(BaseModel):
    period: str
    points: List[TrendPointOut] = Field(default_factory=list)


class TrendsResponse(BaseModel):
    period: str
    running_only: bool = False
    trends: TrendSeriesOut
