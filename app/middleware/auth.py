"""
Auth middlewares: identity resolution and route-group guards.

SECURITY: The dashboard guard is the only thing standing between
anonymous requests and /dashboard handlers.
"""
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp

from app.context import AuthIdentity, context_from
from app.routes.metrics import track_auth_redirect
from app.services.jwt_service import JWTService
from app.services.session_store import AuthSession, CookieSessionStorage

logger = structlog.get_logger()


def matches_prefix(path: str, prefix: str) -> bool:
    """True for the prefix itself and anything below it."""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


class AuthContextMiddleware(BaseHTTPMiddleware):
    """
    Resolve a verified identity for every request.

    The signed session cookie wins; otherwise a valid bearer JWT is used.
    Nothing is rejected here, guards decide what an absent identity means.
    """

    def __init__(self, app: ASGIApp, session_storage: CookieSessionStorage, jwt_service: JWTService):
        super().__init__(app)
        self.session_storage = session_storage
        self.jwt_service = jwt_service

    async def dispatch(self, request: Request, call_next):
        context = context_from(request)
        context.auth = await self.resolve(request)
        return await call_next(request)

    async def resolve(self, request: Request) -> AuthIdentity | None:
        auth_session = await AuthSession.from_request(self.session_storage, request)
        user = await auth_session.read_user()
        if user:
            return AuthIdentity(user_id=user.user_id, source="session", email=user.email)

        authorization = request.headers.get("authorization", "")
        if authorization.startswith("Bearer "):
            payload = self.jwt_service.verify_token(authorization[len("Bearer "):])
            if payload:
                return AuthIdentity(user_id=payload["sub"], source="bearer", email=payload.get("email"))

        return None


class DashboardAuthMiddleware(BaseHTTPMiddleware):
    """Send anonymous dashboard requests home; bind user_id otherwise."""

    def __init__(self, app: ASGIApp, prefix: str = "/dashboard", redirect_to: str = "/"):
        super().__init__(app)
        self.prefix = prefix
        self.redirect_to = redirect_to

    async def dispatch(self, request: Request, call_next):
        if not matches_prefix(request.url.path, self.prefix):
            return await call_next(request)

        context = context_from(request)
        if not context.auth or not context.auth.user_id:
            logger.info("dashboard_auth_redirect", path=request.url.path)
            track_auth_redirect("dashboard")
            return RedirectResponse(self.redirect_to, status_code=302)

        context.user_id = context.auth.user_id
        return await call_next(request)


class APIAuthMiddleware(BaseHTTPMiddleware):
    """Passthrough for /api; API-specific auth policy goes here."""

    def __init__(self, app: ASGIApp, prefix: str = "/api"):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if not matches_prefix(request.url.path, self.prefix):
            return await call_next(request)

        # No API-specific policy yet; identity from AuthContextMiddleware stands
        return await call_next(request)
