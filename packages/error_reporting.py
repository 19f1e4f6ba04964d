import logging
import os

try:  # Optional dependency
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration
except ImportError:  # pragma: no cover - optional
    sentry_sdk = None


def _rate_env(key: str) -> float:
    raw = os.getenv(key) or ""
    try:
        return min(max(float(raw), 0.0), 1.0) if raw else 0.0
    except ValueError:
        return 0.0


def init_error_reporting(service_name: str, enable_fastapi: bool = False) -> bool:
    """Turn on Sentry when STATS_SENTRY_DSN is set; returns whether it did."""
    dsn = os.getenv("STATS_SENTRY_DSN")
    if not dsn or sentry_sdk is None:
        return False

    integrations = [LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)]
    if enable_fastapi:
        integrations.extend([StarletteIntegration(), FastApiIntegration()])

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("STATS_ENV", os.getenv("RUN_MODE", "prod")),
        release=os.getenv("STATS_RELEASE"),
        traces_sample_rate=_rate_env("STATS_SENTRY_TRACES_SAMPLE_RATE"),
        integrations=integrations,
        # Session cookies carry Strava tokens.
        send_default_pii=False,
    )
    sentry_sdk.set_tag("service", service_name)
    return True
