"""Strava REST client: activity pages, athlete profile and OAuth token calls."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from urllib import error, parse, request

from packages.config import (
    STRAVA_API_URL,
    STRAVA_CALLBACK_URL,
    STRAVA_CLIENT_ID,
    STRAVA_CLIENT_SECRET,
    STRAVA_OAUTH_URL,
    STRAVA_TIMEOUT_SECONDS,
)
from packages.metrics import inc
from services.analytics.models import RawActivity

logger = logging.getLogger("strava_stats.strava")

MAX_PER_PAGE = 200
DEFAULT_RETRY_AFTER_SEC = 60


class StravaTransportError(Exception):
    """Strava could not be reached or returned an undecodable body."""


class StravaAPIError(Exception):
    def __init__(self, status_code: int, message: str, retry_after: int = 0):
        super().__init__(status_code, message)
        self.status_code = status_code
        self.message = message
        self.retry_after = retry_after

    def __str__(self) -> str:
        return f"Strava API error (status {self.status_code}): {self.message}"

    def is_rate_limit(self) -> bool:
        return self.status_code == 429

    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600


def _error_message(body: bytes, fallback: str) -> str:
    if not body:
        return fallback
    text = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return text


def api_error_from_http(exc: error.HTTPError) -> StravaAPIError:
    status = exc.code
    try:
        body = exc.read()
    except OSError:
        body = b""
    message = _error_message(body, exc.reason if isinstance(exc.reason, str) else f"HTTP {status}")
    retry_after = 0
    if status == 429:
        try:
            retry_after = int((exc.headers or {}).get("Retry-After") or 0)
        except (TypeError, ValueError):
            retry_after = 0
        retry_after = retry_after or DEFAULT_RETRY_AFTER_SEC
    elif status == 401:
        message = "Unauthorized: token may be expired or invalid"
    elif 500 <= status < 600:
        message = f"Strava API server error: {message}"
    return StravaAPIError(status_code=status, message=message, retry_after=retry_after)


def parse_activities(payload: Any) -> List[RawActivity]:
    if not isinstance(payload, list):
        raise StravaTransportError("Expected a list of activities")
    return [RawActivity.from_payload(item) for item in payload if isinstance(item, dict)]


class StravaClient:
    def __init__(self, api_url: str = STRAVA_API_URL, timeout: float = STRAVA_TIMEOUT_SECONDS):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _get_json(self, path: str, access_token: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.api_url}{path}"
        if params:
            url = f"{url}?{parse.urlencode(params)}"
        req = request.Request(url, headers={"Authorization": f"Bearer {access_token}"})
        inc("strava_requests_total")
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:
                payload = resp.read().decode("utf-8")
        except error.HTTPError as exc:
            inc(f"strava_errors_total{{status=\"{exc.code}\"}}")
            raise api_error_from_http(exc) from exc
        except (error.URLError, OSError) as exc:
            inc("strava_errors_total{status=\"transport\"}")
            raise StravaTransportError(f"Failed to reach Strava: {exc}") from exc
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise StravaTransportError("Failed to decode Strava response") from exc

    def fetch_activities(
        self,
        access_token: str,
        before: Optional[int] = None,
        after: Optional[int] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> List[RawActivity]:
        params: Dict[str, Any] = {}
        if before is not None:
            params["before"] = before
        if after is not None:
            params["after"] = after
        if page is not None:
            params["page"] = page
        if per_page is not None:
            params["per_page"] = per_page
        return parse_activities(self._get_json("/athlete/activities", access_token, params))

    def fetch_all_activities(
        self,
        access_token: str,
        before: Optional[int] = None,
        after: Optional[int] = None,
    ) -> List[RawActivity]:
        activities: List[RawActivity] = []
        page = 1
        while True:
            batch = self.fetch_activities(
                access_token, before=before, after=after, page=page, per_page=MAX_PER_PAGE
            )
            if not batch:
                break
            activities.extend(batch)
            if len(batch) < MAX_PER_PAGE:
                break
            page += 1
        logger.info("fetched %d activities in %d page(s)", len(activities), page)
        return activities

    def fetch_athlete(self, access_token: str) -> Dict[str, Any]:
        payload = self._get_json("/athlete", access_token)
        return payload if isinstance(payload, dict) else {}


def _post_form(url: str, data: dict, timeout: float = STRAVA_TIMEOUT_SECONDS) -> dict:
    body = parse.urlencode(data).encode("utf-8")
    req = request.Request(url, data=body, method="POST")
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            payload = resp.read().decode("utf-8")
    except error.HTTPError as exc:
        raise api_error_from_http(exc) from exc
    except (error.URLError, OSError) as exc:
        raise StravaTransportError(f"Failed to reach Strava: {exc}") from exc
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise StravaTransportError("Failed to decode Strava token response") from exc


def _require_credentials() -> None:
    if not (STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET):
        raise RuntimeError("Strava API not configured. Set STRAVA_CLIENT_ID/STRAVA_CLIENT_SECRET.")


def exchange_code(code: str) -> dict:
    _require_credentials()
    return _post_form(
        f"{STRAVA_OAUTH_URL}/token",
        {
            "client_id": STRAVA_CLIENT_ID,
            "client_secret": STRAVA_CLIENT_SECRET,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": STRAVA_CALLBACK_URL,
        },
    )


def refresh_access_token(refresh_token: str) -> dict:
    _require_credentials()
    return _post_form(
        f"{STRAVA_OAUTH_URL}/token",
        {
            "client_id": STRAVA_CLIENT_ID,
            "client_secret": STRAVA_CLIENT_SECRET,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
    )
