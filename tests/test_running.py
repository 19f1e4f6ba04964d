from services.analytics.running import compute_personal_records, compute_running_stats
from tests.fixtures.activities import normalized


def test_weighted_average_pace_uses_totals():
    runs = [normalized(distance=5000, moving_time=1800), normalized(distance=10000, moving_time=3000)]
    stats = compute_running_stats(runs)
    assert stats.total_runs == 2
    assert stats.runs_over_10k == 1
    assert stats.total_distance == 15000
    assert stats.average_pace == "8:35"
    assert stats.average_pace_min_per_km == "5:20"


def test_non_running_activities_are_ignored():
    activities = [
        normalized(sport_type="Ride", distance=40000, moving_time=4000),
        normalized(sport_type="TrailRun", distance=8000, moving_time=3000),
        normalized(sport_type="VirtualRun", distance=2000, moving_time=600),
    ]
    stats = compute_running_stats(activities)
    assert stats.total_runs == 2
    assert stats.total_distance == 10000


def test_empty_stats():
    stats = compute_running_stats([])
    assert stats.total_runs == 0
    assert stats.average_pace is None
    assert stats.average_pace_min_per_km is None


def test_fastest_mile_tolerance_band():
    inside = normalized(distance=1700, moving_time=500, activity_id=1)
    outside = normalized(distance=1900, moving_time=400, activity_id=2)
    prs = compute_personal_records([inside, outside])
    assert prs.fastest_mile.id == 1


def test_fastest_10k_band_and_tie_keeps_first():
    first = normalized(distance=9600, moving_time=2700, activity_id=1)
    tied = normalized(distance=10400, moving_time=2700, activity_id=2)
    too_long = normalized(distance=10600, moving_time=2000, activity_id=3)
    prs = compute_personal_records([first, tied, too_long])
    assert prs.fastest_10k.id == 1
    assert prs.longest_run.id == 3


def test_longest_and_most_elevation():
    flat = normalized(distance=21000, moving_time=6500, elevation=5, activity_id=1)
    hilly = normalized(distance=8000, moving_time=3200, elevation=450, activity_id=2)
    ride = normalized(sport_type="Ride", distance=90000, moving_time=10000, elevation=1500, activity_id=3)
    prs = compute_personal_records([flat, hilly, ride])
    assert prs.longest_run.id == 1
    assert prs.most_elevation.id == 2
    assert prs.most_elevation.elevation_gain == 450
    assert prs.longest_run.pace is not None


def test_record_carries_display_fields():
    run = normalized("2025-11-26", distance=1609.34, moving_time=420, name="Track mile", activity_id=7)
    record = compute_personal_records([run]).fastest_mile
    assert record.name == "Track mile"
    assert record.date == "2025-11-26"
    assert record.pace == "7:00"


def test_zero_distance_run_has_no_pace():
    record = compute_personal_records([normalized(distance=0, moving_time=600)]).longest_run
    assert record.pace is None
    assert record.pace_min_per_km is None


def test_empty_records():
    prs = compute_personal_records([])
    assert prs.fastest_mile is None
    assert prs.fastest_10k is None
    assert prs.longest_run is None
    assert prs.most_elevation is None


def test_fastest_mile_at_1700m():
    prs = compute_personal_records([normalized(distance=1700, moving_time=400, activity_id=5)])
    assert prs.fastest_mile.id == 5
    assert prs.fastest_mile.moving_time == 400


def test_longest_run_tie_keeps_first():
    first = normalized(distance=12000, moving_time=4000, activity_id=1)
    second = normalized(distance=12000, moving_time=3600, activity_id=2)
    assert compute_personal_records([first, second]).longest_run.id == 1


def test_most_elevation_tie_keeps_first():
    first = normalized(distance=8000, moving_time=3000, elevation=300, activity_id=1)
    second = normalized(distance=9000, moving_time=3300, elevation=300, activity_id=2)
    assert compute_personal_records([first, second]).most_elevation.id == 1
