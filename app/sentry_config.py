"""
Sentry configuration for error tracking.

Captures unhandled exceptions with request and user context.
"""
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.config import Settings
from app.logging_config import get_logger

logger = get_logger(component="sentry")


def configure_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry with FastAPI and SQLAlchemy integrations.

    Does nothing unless SENTRY_DSN is set. Returns whether Sentry was enabled.
    """
    dsn = settings.SENTRY_DSN

    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return False

    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        before_send=add_context,
        # Sample rate: capture 10% of transactions for performance monitoring
        traces_sample_rate=0.1,
        environment=settings.ENVIRONMENT,
        release=settings.APP_VERSION,
        # Session cookies and OAuth codes must not leave the process
        send_default_pii=False,
    )

    logger.info("sentry_enabled", environment=settings.ENVIRONMENT)
    return True


def add_context(event, hint):
    """
    Strip cookie headers from error events before they are sent.
    """
    request = event.get("request") or {}
    headers = request.get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in ("cookie", "authorization"):
                headers[name] = "[Filtered]"
    return event


def capture_exception(exc_info=None):
    """
    Capture an exception to Sentry.

    Usage:
        try:
            # some code
        except Exception:
            capture_exception()
    """
    if sentry_sdk.get_client().is_active():
        sentry_sdk.capture_exception(exc_info)
