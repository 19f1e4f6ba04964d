from services.analytics.models import ReportingWindow
from services.analytics.summary import summarize_activities
from tests.fixtures.activities import day, normalized


def test_explicit_window_is_echoed():
    window = ReportingWindow(start_date=day("2025-11-21"), end_date=day("2025-11-25"))
    summary = summarize_activities([normalized("2025-11-22", moving_time=1800)], window)
    assert summary.date_range == "Nov 21 - Nov 25"
    assert summary.start_date == "2025-11-21"
    assert summary.end_date == "2025-11-25"
    assert summary.total_activities == 1
    assert summary.total_moving_time == "30m"


def test_range_derived_from_activities():
    activities = [normalized("2025-12-03", moving_time=3600), normalized("2025-11-28", moving_time=61)]
    summary = summarize_activities(activities, ReportingWindow(days_back=7))
    assert summary.date_range == "Nov 28 - Dec 3"
    assert summary.total_moving_time == "1h 1m 1s"
    assert [a.local_date_key for a in summary.activities] == ["2025-12-03", "2025-11-28"]


def test_empty_summary():
    summary = summarize_activities([])
    assert summary.date_range == "No activities"
    assert summary.total_activities == 0
    assert summary.total_moving_time == "0s"
    assert summary.activities == []
