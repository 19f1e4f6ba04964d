import time
from urllib import parse

import pytest
from fastapi.testclient import TestClient

from apps.api import auth as auth_helpers
from apps.api.auth import SESSION_COOKIE, STATE_COOKIE, encode_session
from apps.api.cache import clear
from apps.api.deps import get_strava_client
from apps.api.main import app
from apps.api.routes import auth as auth_routes
from apps.api.schemas import ActivitiesResponse, RunningStatsResponse, TrendsResponse
from services.analytics.models import RawActivity
from services.ingestion.strava_api import StravaAPIError, StravaTransportError
from tests.fixtures.activities import strava_payload

WINDOW = "start_date=2025-11-20&end_date=2025-11-26"


class FakeStravaClient:
    def __init__(self, payloads=None, errors=None):
        self.payloads = payloads or []
        self.errors = list(errors or [])
        self.tokens = []

    def fetch_all_activities(self, access_token, before=None, after=None):
        self.tokens.append(access_token)
        if self.errors:
            raise self.errors.pop(0)
        return [RawActivity.from_payload(p) for p in self.payloads]

    def fetch_athlete(self, access_token):
        return {"id": 42, "firstname": "Ada", "lastname": "Runner", "profile": "https://img.test/42.jpg"}


PAYLOADS = [
    strava_payload(1, "2025-11-24T07:00:00Z", distance=5000, moving_time=1800),
    strava_payload(2, "2025-11-25T07:00:00Z", distance=10000, moving_time=3000),
    strava_payload(3, "2025-11-25T18:00:00Z", sport_type="Ride", distance=30000, moving_time=3600),
    strava_payload(4, "2025-11-10T07:00:00Z", distance=8000, moving_time=2400),
]


def session_cookie(expires_in=3600):
    return encode_session(
        {
            "sub": "42",
            "name": "Ada Runner",
            "profile": "https://img.test/42.jpg",
            "access_token": "tok",
            "refresh_token": "refresh",
            "expires_at": int(time.time()) + expires_in,
        }
    )


@pytest.fixture()
def fake_strava():
    return FakeStravaClient(PAYLOADS)


@pytest.fixture()
def client(monkeypatch, fake_strava):
    monkeypatch.setenv("STATS_CACHE_PURGE_SECONDS", "0")
    clear()
    app.dependency_overrides[get_strava_client] = lambda: fake_strava
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    clear()


@pytest.fixture()
def logged_in(client):
    client.cookies.set(SESSION_COOKIE, session_cookie())
    return client


def test_activities_contract_http(logged_in):
    resp = logged_in.get(f"/api/v1/activities?{WINDOW}")
    assert resp.status_code == 200
    body = ActivitiesResponse.model_validate(resp.json())
    assert body.date_range == "Nov 20 - Nov 26"
    assert body.total_activities == 3
    assert [a.id for a in body.activities] == [1, 2, 3]
    assert body.activities[0].local_date.isoformat() == "2025-11-24"


def test_running_stats_contract_http(logged_in):
    resp = logged_in.get(f"/api/running-stats?{WINDOW}")
    assert resp.status_code == 200
    body = RunningStatsResponse.model_validate(resp.json())
    assert body.stats.total_runs == 2
    assert body.stats.average_pace == "8:35"
    assert body.prs.fastest_10k.id == 2
    assert body.histogram.bins[-1].range.endswith(" mi")


def test_running_stats_km_histogram(logged_in):
    resp = logged_in.get(f"/api/running-stats?{WINDOW}&units=km")
    assert resp.status_code == 200
    bins = resp.json()["histogram"]["bins"]
    assert len(bins) == 11
    assert bins[5]["count"] == 1


def test_trends_contract_http(logged_in):
    resp = logged_in.get(f"/api/trends?{WINDOW}&period=weekly&running_only=true")
    assert resp.status_code == 200
    body = TrendsResponse.model_validate(resp.json())
    assert body.running_only is True
    (point,) = body.trends.points
    assert point.date == "2025-11-24"
    assert point.count == 2


def test_invalid_period_is_rejected(logged_in):
    resp = logged_in.get("/api/trends?period=yearly")
    assert resp.status_code == 400
    assert "Invalid period" in resp.json()["error"]["message"]


def test_reversed_window_is_rejected(logged_in):
    resp = logged_in.get("/api/activities?start_date=2025-11-26&end_date=2025-11-20")
    assert resp.status_code == 400


def test_missing_session_is_unauthorized(client):
    resp = client.get("/api/activities")
    assert resp.status_code == 401
    error = resp.json()["error"]
    assert error["code"] == "http_401"
    assert error["request_id"]


def test_repeat_requests_hit_cache(logged_in, fake_strava):
    logged_in.get(f"/api/activities?{WINDOW}")
    logged_in.get(f"/api/trends?{WINDOW}")
    assert len(fake_strava.tokens) == 1


def test_rate_limit_maps_to_429(logged_in, fake_strava):
    fake_strava.errors = [StravaAPIError(429, "Rate Limit Exceeded", retry_after=30)]
    resp = logged_in.get("/api/activities")
    assert resp.status_code == 429
    assert resp.headers["retry-after"] == "30"
    error = resp.json()["error"]
    assert error["message"] == "Rate limit exceeded. Please try again later."
    assert error["details"]["retry_after"] == 30


def test_transport_failure_maps_to_502(logged_in, fake_strava):
    fake_strava.errors = [StravaTransportError("boom")]
    resp = logged_in.get("/api/activities")
    assert resp.status_code == 502


def test_upstream_401_refreshes_and_retries(logged_in, fake_strava, monkeypatch):
    monkeypatch.setattr(
        auth_helpers,
        "refresh_access_token",
        lambda token: {"access_token": "tok2", "refresh_token": "refresh2", "expires_at": int(time.time()) + 7200},
    )
    fake_strava.errors = [StravaAPIError(401, "Unauthorized: token may be expired or invalid")]
    resp = logged_in.get(f"/api/activities?{WINDOW}")
    assert resp.status_code == 200
    assert fake_strava.tokens == ["tok", "tok2"]
    assert SESSION_COOKIE in resp.headers.get("set-cookie", "")


def test_failed_refresh_is_unauthorized(client, monkeypatch):
    def fail(token):
        raise StravaAPIError(400, "Bad Request")

    monkeypatch.setattr(auth_helpers, "refresh_access_token", fail)
    client.cookies.set(SESSION_COOKIE, session_cookie(expires_in=0))
    resp = client.get("/api/activities")
    assert resp.status_code == 401
    assert "log in again" in resp.json()["error"]["message"]


def test_session_endpoint(client):
    assert client.get("/api/session").json() == {"authenticated": False, "name": None, "profile_url": None}
    client.cookies.set(SESSION_COOKIE, session_cookie())
    body = client.get("/api/session").json()
    assert body["authenticated"] is True
    assert body["name"] == "Ada Runner"


def test_login_callback_flow(client, monkeypatch):
    login = client.get("/auth/login", follow_redirects=False)
    assert login.status_code == 307
    location = login.headers["location"]
    state = parse.parse_qs(parse.urlparse(location).query)["state"][0]
    assert STATE_COOKIE in login.headers.get("set-cookie", "")

    monkeypatch.setattr(
        auth_routes,
        "exchange_code",
        lambda code: {"access_token": "tok", "refresh_token": "r", "expires_at": int(time.time()) + 3600},
    )
    resp = client.get(f"/auth/callback?state={state}&code=abc", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/"
    assert SESSION_COOKIE in resp.headers.get("set-cookie", "")
    assert client.get("/api/session").json()["name"] == "Ada Runner"


def test_callback_rejects_bad_state(client):
    client.get("/auth/login", follow_redirects=False)
    resp = client.get("/auth/callback?state=wrong&code=abc", follow_redirects=False)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "State mismatch"
    assert client.get("/auth/callback?code=abc", follow_redirects=False).status_code == 400


def test_logout_clears_session(logged_in):
    resp = logged_in.get("/auth/logout", follow_redirects=False)
    assert resp.status_code == 302
    assert SESSION_COOKIE in resp.headers.get("set-cookie", "")


def test_health_and_metrics(client):
    health = client.get("/api/v1/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text
