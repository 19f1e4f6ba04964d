from pathlib import Path
import os

try:
    from dotenv import load_dotenv
except ImportError:  # pragma: no cover - optional in some environments
    load_dotenv = None

ROOT = Path(__file__).resolve().parents[1]

if load_dotenv:
    load_dotenv(ROOT / ".env")

RUN_MODE = os.getenv("RUN_MODE", "dev").lower()
API_HOST = os.getenv("STATS_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("STATS_API_PORT", os.getenv("PORT", "8080")))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "STATS_CORS_ORIGINS",
        "http://127.0.0.1:8080,http://localhost:8080",
    ).split(",")
    if origin.strip()
]

# Strava OAuth application
STRAVA_CLIENT_ID = os.getenv("STRAVA_CLIENT_ID")
STRAVA_CLIENT_SECRET = os.getenv("STRAVA_CLIENT_SECRET")
STRAVA_CALLBACK_URL = os.getenv("STRAVA_CALLBACK_URL", "http://localhost:8080/auth/callback")
STRAVA_API_URL = os.getenv("STRAVA_API_URL", "https://www.strava.com/api/v3")
STRAVA_OAUTH_URL = os.getenv("STRAVA_OAUTH_URL", "https://www.strava.com/oauth")
STRAVA_SCOPES = os.getenv("STRAVA_SCOPES", "read,activity:read_all")
STRAVA_TIMEOUT_SECONDS = float(os.getenv("STATS_STRAVA_TIMEOUT_SECONDS", "30"))

# Session cookie (HS256 JWT)
SESSION_SECRET = os.getenv("STATS_SESSION_SECRET", os.getenv("SESSION_SECRET", "dev-secret"))
SESSION_ALG = os.getenv("STATS_SESSION_ALG", "HS256")
SESSION_TTL_DAYS = int(os.getenv("STATS_SESSION_TTL_DAYS", "30"))
SESSION_COOKIE_SECURE = os.getenv("STATS_SESSION_COOKIE_SECURE", "1" if RUN_MODE == "prod" else "0") == "1"

# Analytics
CACHE_TTL_SECONDS = int(os.getenv("STATS_CACHE_TTL_SECONDS", "5"))
DEFAULT_DAYS_BACK = int(os.getenv("STATS_DEFAULT_DAYS_BACK", "7"))
