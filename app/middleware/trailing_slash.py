"""
Append a trailing slash to paths that would otherwise 404.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

# Stamped by inner stages; kept on the replacement redirect
CARRIED_HEADERS = ("X-Response-Time", "X-Request-ID")


class TrailingSlashMiddleware(BaseHTTPMiddleware):
    """
    Redirect GET/HEAD requests that 404 to the same path with a slash added.

    Only applies when the path does not already end in "/". The query
    string is kept.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        path = request.url.path
        if (
            response.status_code == 404
            and request.method in ("GET", "HEAD")
            and not path.endswith("/")
        ):
            redirect = RedirectResponse(str(request.url.replace(path=path + "/")), status_code=301)
            for name in CARRIED_HEADERS:
                if name in response.headers:
                    redirect.headers[name] = response.headers[name]
            return redirect

        return response
