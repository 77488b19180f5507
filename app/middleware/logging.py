"""
Logging middleware for request/response logging.

Logs all HTTP requests with timing and context.
"""
import time
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.sentry_config import capture_exception

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing and context.

    Adds: request_id, user_id, route, duration_ms, status to every log.
    The request context is created further down the chain, so it is read
    once the response is back.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        request_logger = logger.bind(
            route=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            request_logger.bind(**_context_fields(request)).error(
                "request_failed",
                path=request.url.path,
                status_code=500,
                duration_ms=round(duration_ms, 2),
                error=str(e)
            )
            capture_exception(e)
            raise

        duration_ms = (time.time() - start_time) * 1000

        request_logger.bind(**_context_fields(request)).info(
            "request_completed",
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2)
        )

        return response


def _context_fields(request: Request) -> dict:
    context = getattr(request.state, "context", None)
    if context is None:
        return {"request_id": None, "user_id": None}
    user_id = context.user_id or (context.auth.user_id if context.auth else None)
    return {"request_id": context.request_id, "user_id": user_id}
