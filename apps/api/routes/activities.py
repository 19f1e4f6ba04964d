import logging
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from packages.metrics import timed
from packages.request_context import athlete_context
from services.analytics.engine import (
    compute_personal_records,
    compute_running_stats,
    compute_trends,
    generate_histogram,
    normalize_activities,
    summarize_activities,
)
from services.ingestion.strava_api import StravaClient
from ..deps import StravaSession, get_strava_client, get_strava_session, load_raw_activities
from ..schemas import ActivitiesResponse, ErrorResponse, RunningStatsResponse, TrendsResponse
from ..utils import parse_window


router = APIRouter(
    responses={code: {"model": ErrorResponse} for code in (400, 401, 429, 502)},
)

logger = logging.getLogger("strava_stats.api")

TREND_PERIODS = ("daily", "weekly", "monthly")


@router.get("/activities", response_model=ActivitiesResponse)
def activities(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    session: StravaSession = Depends(get_strava_session),
    client: StravaClient = Depends(get_strava_client),
):
    window = parse_window(start_date, end_date)
    with athlete_context(session.athlete_id):
        raw = load_raw_activities(session, window, client)
        with timed("engine_duration_seconds{op=\"activities\"}"):
            normalized = normalize_activities(raw, window)
            summary = summarize_activities(normalized, window)
        logger.info("activities: %d raw, %d in window", len(raw), summary.total_activities)
    return asdict(summary)


@router.get("/running-stats", response_model=RunningStatsResponse)
def running_stats(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    units: Literal["mi", "km"] = "mi",
    session: StravaSession = Depends(get_strava_session),
    client: StravaClient = Depends(get_strava_client),
):
    window = parse_window(start_date, end_date)
    with athlete_context(session.athlete_id):
        raw = load_raw_activities(session, window, client)
        with timed("engine_duration_seconds{op=\"running_stats\"}"):
            normalized = normalize_activities(raw, window)
            stats = compute_running_stats(normalized)
            prs = compute_personal_records(normalized)
            histogram = generate_histogram(normalized, use_miles=units == "mi")
        logger.info("running stats: %d total runs", stats.total_runs)
    return {"stats": asdict(stats), "prs": asdict(prs), "histogram": asdict(histogram)}


@router.get("/trends", response_model=TrendsResponse)
def trends(
    period: str = "daily",
    running_only: bool = Query(False),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    session: StravaSession = Depends(get_strava_session),
    client: StravaClient = Depends(get_strava_client),
):
    if period not in TREND_PERIODS:
        raise HTTPException(status_code=400, detail="Invalid period. Must be 'daily', 'weekly', or 'monthly'")
    window = parse_window(start_date, end_date)
    with athlete_context(session.athlete_id):
        raw = load_raw_activities(session, window, client)
        with timed("engine_duration_seconds{op=\"trends\"}"):
            normalized = normalize_activities(raw, window)
            series = compute_trends(normalized, period, running_only)
        logger.info("trends: %d points period=%s running_only=%s", len(series.points), period, running_only)
    return {"period": period, "running_only": running_only, "trends": asdict(series)}
