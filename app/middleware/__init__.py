"""
The request pipeline.

build_middleware returns the middlewares outermost first. Order matters:
logging and timing wrap everything, including guard redirects, and the
database session exists before any auth stage or handler runs.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware import Middleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.config import Settings
from app.middleware.auth import APIAuthMiddleware, AuthContextMiddleware, DashboardAuthMiddleware
from app.middleware.context import RequestContextMiddleware
from app.middleware.database import DatabaseMiddleware
from app.middleware.logging import LoggingMiddleware
from app.middleware.timing import TimingMiddleware
from app.middleware.trailing_slash import TrailingSlashMiddleware
from app.services.jwt_service import JWTService
from app.services.session_store import CookieSessionStorage

COMPRESSION_MINIMUM_SIZE = 1024


def build_middleware(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    session_storage: CookieSessionStorage,
    jwt_service: JWTService,
) -> list[Middleware]:
    middleware = [
        Middleware(TrailingSlashMiddleware),
        Middleware(LoggingMiddleware),
    ]

    if not settings.TEST:
        middleware.append(Middleware(GZipMiddleware, minimum_size=COMPRESSION_MINIMUM_SIZE))

    middleware += [
        Middleware(RequestContextMiddleware),
        Middleware(TimingMiddleware),
        Middleware(DatabaseMiddleware, session_factory=session_factory),
        Middleware(AuthContextMiddleware, session_storage=session_storage, jwt_service=jwt_service),
        Middleware(DashboardAuthMiddleware, prefix="/dashboard", redirect_to="/"),
        Middleware(APIAuthMiddleware, prefix="/api"),
        # Authlib keeps the OAuth state here, apart from the login session
        Middleware(
            SessionMiddleware,
            secret_key=settings.SESSION_SECRET,
            session_cookie="oauth_state",
            max_age=60 * 10,
            same_site=settings.SESSION_COOKIE_SAMESITE,
            https_only=settings.SESSION_COOKIE_SECURE,
        ),
    ]

    return middleware
