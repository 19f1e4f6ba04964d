import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from packages.config import SESSION_COOKIE_SECURE
from services.ingestion.strava_api import StravaAPIError, StravaClient, StravaTransportError, exchange_code
from ..auth import (
    SESSION_COOKIE,
    STATE_COOKIE,
    STATE_TTL_MINUTES,
    authorize_url,
    decode_session,
    decode_state,
    encode_state,
    new_oauth_state,
    session_from_token_response,
)
from ..deps import get_strava_client, store_session
from ..schemas import SessionResponse


router = APIRouter()

logger = logging.getLogger("strava_stats.api")


@router.get("/auth/login")
def login():
    state = new_oauth_state()
    response = RedirectResponse(authorize_url(state), status_code=307)
    response.set_cookie(
        STATE_COOKIE,
        encode_state(state),
        max_age=STATE_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return response


@router.get("/auth/callback")
def callback(
    request: Request,
    state: Optional[str] = None,
    code: Optional[str] = None,
    client: StravaClient = Depends(get_strava_client),
):
    if not state:
        raise HTTPException(status_code=400, detail="State parameter missing")
    expected = decode_state(request.cookies.get(STATE_COOKIE))
    if not expected:
        raise HTTPException(status_code=400, detail="State not found in session")
    if state != expected:
        raise HTTPException(status_code=400, detail="State mismatch")
    if not code:
        raise HTTPException(status_code=400, detail="Code not found")

    try:
        payload = exchange_code(code)
    except RuntimeError as exc:
        logger.error("oauth not configured: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    except (StravaAPIError, StravaTransportError) as exc:
        logger.warning("token exchange failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to exchange token with Strava")

    if not payload.get("athlete") and payload.get("access_token"):
        try:
            payload = dict(payload, athlete=client.fetch_athlete(payload["access_token"]))
        except (StravaAPIError, StravaTransportError) as exc:
            logger.warning("athlete lookup failed: %s", exc)

    session = session_from_token_response(payload)
    if not session.get("access_token"):
        raise HTTPException(status_code=502, detail="Strava token response missing access_token")
    logger.info("athlete %s logged in", session.get("sub") or "-")
    response = RedirectResponse("/", status_code=307)
    response.delete_cookie(STATE_COOKIE)
    store_session(response, session)
    return response


@router.get("/auth/logout")
def logout():
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/session", response_model=SessionResponse)
def current_session(request: Request):
    session = decode_session(request.cookies.get(SESSION_COOKIE))
    if not session:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "name": session.get("name") or None,
        "profile_url": session.get("profile") or None,
    }
