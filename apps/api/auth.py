import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from urllib import parse

import jwt

from packages.config import (
    SESSION_ALG,
    SESSION_SECRET,
    SESSION_TTL_DAYS,
    STRAVA_CALLBACK_URL,
    STRAVA_CLIENT_ID,
    STRAVA_OAUTH_URL,
    STRAVA_SCOPES,
)
from services.ingestion.strava_api import refresh_access_token

SESSION_COOKIE = "strava-session"
STATE_COOKIE = "strava-oauth-state"
STATE_TTL_MINUTES = 10
REFRESH_MARGIN_SEC = 60

TOKEN_KEYS = ("access_token", "refresh_token", "expires_at")


def _encode(payload: Dict[str, Any], ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = dict(payload)
    claims["iat"] = int(now.timestamp())
    claims["exp"] = int((now + ttl).timestamp())
    return jwt.encode(claims, SESSION_SECRET, algorithm=SESSION_ALG)


def _decode(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        return jwt.decode(token, SESSION_SECRET, algorithms=[SESSION_ALG])
    except jwt.PyJWTError:
        return None


def new_oauth_state() -> str:
    return secrets.token_urlsafe(32)


def encode_state(state: str) -> str:
    return _encode({"state": state}, timedelta(minutes=STATE_TTL_MINUTES))


def decode_state(token: Optional[str]) -> Optional[str]:
    payload = _decode(token)
    return payload.get("state") if payload else None


def authorize_url(state: str) -> str:
    params = {
        "client_id": STRAVA_CLIENT_ID or "",
        "redirect_uri": STRAVA_CALLBACK_URL,
        "response_type": "code",
        "state": state,
        "scope": STRAVA_SCOPES,
        "approval_prompt": "force",
    }
    return f"{STRAVA_OAUTH_URL}/authorize?{parse.urlencode(params)}"


def athlete_display(athlete: Optional[Dict[str, Any]]) -> Tuple[str, str]:
    if not athlete:
        return "", ""
    name = f"{athlete.get('firstname') or ''} {athlete.get('lastname') or ''}".strip()
    return name or (athlete.get("username") or ""), athlete.get("profile") or ""


def session_from_token_response(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Session claims from a Strava /oauth/token response."""
    athlete = payload.get("athlete") or {}
    name, profile = athlete_display(athlete)
    session = {key: payload.get(key) for key in TOKEN_KEYS}
    session["sub"] = str(athlete.get("id") or "")
    session["name"] = name
    session["profile"] = profile
    return session


def encode_session(session: Dict[str, Any]) -> str:
    claims = {k: v for k, v in session.items() if k not in ("iat", "exp")}
    return _encode(claims, timedelta(days=SESSION_TTL_DAYS))


def decode_session(token: Optional[str]) -> Optional[Dict[str, Any]]:
    session = _decode(token)
    if not session or not session.get("access_token"):
        return None
    return session


def ensure_fresh_token(session: Dict[str, Any], force: bool = False) -> Tuple[Dict[str, Any], bool]:
    """Refresh the access token when it is about to expire.

    Returns the (possibly updated) session and whether it changed.
    """
    now = int(time.time())
    expires_at = session.get("expires_at")
    if not force and expires_at and int(expires_at) > now + REFRESH_MARGIN_SEC:
        return session, False
    refresh_token = session.get("refresh_token")
    if not refresh_token:
        raise RuntimeError("Session has no refresh token; log in again.")
    payload = refresh_access_token(refresh_token)
    updated = dict(session)
    updated["access_token"] = payload["access_token"]
    updated["refresh_token"] = payload.get("refresh_token", refresh_token)
    updated["expires_at"] = int(payload.get("expires_at", now + 3600))
    return updated, True
