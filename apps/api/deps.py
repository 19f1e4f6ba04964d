import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from fastapi import HTTPException, Request, Response, status

from packages.config import CACHE_TTL_SECONDS, SESSION_COOKIE_SECURE, SESSION_TTL_DAYS
from services.analytics.models import RawActivity, ReportingWindow
from services.ingestion.strava_api import StravaAPIError, StravaClient, StravaTransportError
from .auth import SESSION_COOKIE, decode_session, encode_session, ensure_fresh_token
from .cache import get_or_set
from .utils import fetch_after_epoch, window_cache_key

logger = logging.getLogger("strava_stats.api")


def get_strava_client() -> StravaClient:
    return StravaClient()


def store_session(response: Response, session: Dict[str, Any]) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        encode_session(session),
        max_age=SESSION_TTL_DAYS * 86400,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )


@dataclass
class StravaSession:
    claims: Dict[str, Any]
    response: Response

    @property
    def athlete_id(self) -> str:
        return str(self.claims.get("sub") or "-")

    @property
    def access_token(self) -> str:
        return self.claims["access_token"]

    def refresh(self, force: bool = False) -> None:
        try:
            claims, changed = ensure_fresh_token(self.claims, force=force)
        except (StravaAPIError, StravaTransportError, RuntimeError, KeyError) as exc:
            logger.warning("token refresh failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized: token refresh failed. Please log in again.",
            )
        if changed:
            self.claims = claims
            store_session(self.response, claims)


def get_strava_session(request: Request, response: Response) -> StravaSession:
    claims = decode_session(request.cookies.get(SESSION_COOKIE))
    if not claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized: no session")
    session = StravaSession(claims=claims, response=response)
    session.refresh()
    return session


def _raise_for_upstream(exc: Exception) -> None:
    if isinstance(exc, StravaTransportError):
        logger.error("strava transport error: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch activities from Strava.")
    if not isinstance(exc, StravaAPIError):
        raise exc
    if exc.is_rate_limit():
        logger.warning("strava rate limit: %s retry_after=%s", exc.message, exc.retry_after)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": "Rate limit exceeded. Please try again later.",
                "upstream_message": exc.message,
                "retry_after": exc.retry_after,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )
    if exc.is_unauthorized():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized: please log in again.")
    if exc.is_server_error():
        logger.error("strava server error: %s", exc.message)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Strava API is temporarily unavailable. Please try again later.",
        )
    raise HTTPException(status_code=exc.status_code, detail=exc.message)


def load_raw_activities(
    session: StravaSession,
    window: ReportingWindow,
    client: StravaClient,
) -> List[RawActivity]:
    """Raw activities for the window, served from the short-TTL cache when fresh.

    An upstream 401 gets one forced token refresh and retry.
    """
    key = window_cache_key(session.athlete_id, window)
    after = fetch_after_epoch(window)

    def compute():
        return client.fetch_all_activities(session.access_token, after=after)

    try:
        return get_or_set(key, CACHE_TTL_SECONDS, compute)
    except StravaAPIError as exc:
        if not exc.is_unauthorized():
            _raise_for_upstream(exc)
        logger.info("strava returned 401, refreshing token and retrying")
        session.refresh(force=True)
    except StravaTransportError as exc:
        _raise_for_upstream(exc)

    try:
        return get_or_set(key, CACHE_TTL_SECONDS, compute)
    except (StravaAPIError, StravaTransportError) as exc:
        _raise_for_upstream(exc)
        raise

