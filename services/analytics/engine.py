"""Public entry points of the analytics engine.

Every function here is a pure transform of its inputs: no I/O, no shared
state, safe to call from concurrent requests.
"""
from .classify import filter_running, is_running_activity
from .histogram import generate_histogram
from .models import (
    ActivitySummary,
    DistanceHistogram,
    HistogramBin,
    NormalizedActivity,
    PersonalRecords,
    RawActivity,
    ReportingWindow,
    RunRecord,
    RunningStats,
    TrendDataPoint,
    TrendSeries,
)
from .normalize import normalize_activities, normalize_activity
from .running import compute_personal_records, compute_running_stats
from .summary import summarize_activities
from .trends import TrendPeriod, compute_trends

__all__ = [
    "ActivitySummary",
    "DistanceHistogram",
    "HistogramBin",
    "NormalizedActivity",
    "PersonalRecords",
    "RawActivity",
    "ReportingWindow",
    "RunRecord",
    "RunningStats",
    "TrendDataPoint",
    "TrendPeriod",
    "TrendSeries",
    "compute_personal_records",
    "compute_running_stats",
    "compute_trends",
    "filter_running",
    "generate_histogram",
    "is_running_activity",
    "normalize_activities",
    "normalize_activity",
    "summarize_activities",
]
