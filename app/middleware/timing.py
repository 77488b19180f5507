"""
Response timing.
"""
import time

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

from app.routes.metrics import track_request
from app.sentry_config import capture_exception

RESPONSE_TIME_HEADER = "X-Response-Time"

logger = structlog.get_logger()


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Stamp every response with the elapsed milliseconds and record metrics.

    An exception escaping the inner stages is answered with a 500 here, so
    error responses carry the header too.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("unhandled_exception", path=request.url.path, error=str(e))
            capture_exception(e)
            response = PlainTextResponse("Internal Server Error", status_code=500)
        elapsed = time.perf_counter() - start

        response.headers[RESPONSE_TIME_HEADER] = str(int(elapsed * 1000))

        # Label by route template; unmatched paths share one label
        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        track_request(request.method, endpoint, response.status_code, elapsed)

        return response
