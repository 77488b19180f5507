"""
Gatehouse - Google OAuth login service

FastAPI application factory.

Run with:
    uvicorn app.main:create_app --factory
"""
from contextlib import asynccontextmanager

from authlib.integrations.starlette_client import OAuthError
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import RedirectResponse

# Import observability modules
from app.config import Settings, settings as default_settings
from app.logging_config import get_logger
from app.sentry_config import capture_exception, configure_sentry
from app.routes.metrics import router as metrics_router

from app.database import create_engine, create_session_factory
from app.exceptions import AuthError, RedirectRequired
from app.middleware import build_middleware
from app.services.authenticator import Authenticator
from app.services.jwt_service import JWTService
from app.services.session_store import CookieSessionStorage

# Import route modules
from app.routes.auth import router as auth_router
from app.routes.api import router as api_router
from app.routes.dashboard import router as dashboard_router

logger = get_logger(component="app")


async def handle_redirect(request: Request, exc: RedirectRequired):
    """Turn a guard's redirect signal into the response it asked for."""
    return RedirectResponse(exc.url, status_code=302, headers=exc.headers)


async def handle_auth_error(request: Request, exc: AuthError):
    """
    Answer auth failures from inside the middleware chain.

    Handled here rather than by the server error fallback so the response
    still goes through timing and logging.
    """
    logger.error(
        "auth_error",
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
    )
    if exc.status_code >= 500:
        capture_exception(exc)
    return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)


async def handle_oauth_error(request: Request, exc: OAuthError):
    """A failed or tampered OAuth callback is the client's problem."""
    logger.warning("oauth_error", error=exc.error, path=request.url.path)
    return JSONResponse({"detail": "OAuth login failed"}, status_code=400)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Raises AuthConfigurationError straight away if login settings are missing.
    """
    settings = settings or default_settings

    # Initialize Sentry (if SENTRY_DSN is set)
    configure_sentry(settings)

    # Fails fast on missing secrets
    authenticator = Authenticator(settings)

    engine = create_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)

    session_storage = CookieSessionStorage(
        secret=settings.SESSION_SECRET,
        cookie_name=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        secure=settings.SESSION_COOKIE_SECURE,
        same_site=settings.SESSION_COOKIE_SAMESITE,
    )
    jwt_service = JWTService(
        secret_key=settings.SESSION_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expiration_minutes=settings.JWT_EXPIRATION_MINUTES,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Google OAuth login with cookie sessions",
        middleware=build_middleware(settings, session_factory, session_storage, jwt_service),
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.authenticator = authenticator
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.session_storage = session_storage
    app.state.jwt_service = jwt_service

    app.add_exception_handler(RedirectRequired, handle_redirect)
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(OAuthError, handle_oauth_error)

    # Include metrics endpoint FIRST (so it's always available)
    app.include_router(metrics_router)

    # Include authentication routes
    app.include_router(auth_router)

    # Include dashboard routes
    app.include_router(dashboard_router)

    # Include API routes
    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Home page."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running"
        }

    @app.get("/health")
    async def health():
        """Liveness check."""
        return {"status": "healthy"}

    logger.info("app_created", environment=settings.ENVIRONMENT, compression=not settings.TEST)
    return app
