"""
Authentication dependencies for FastAPI.

SECURITY: auth_required is the guard for any handler that needs the
logged-in user's session.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.context import RequestContext, context_from
from app.exceptions import RedirectRequired
from app.routes.metrics import track_auth_redirect
from app.schemas import UserSnapshot
from app.services.authenticator import Authenticator
from app.services.session_store import AuthSession, CookieSessionStorage

LOGIN_URL = "/login"


def get_context(request: Request) -> RequestContext:
    return context_from(request)


def get_db(context: RequestContext = Depends(get_context)) -> AsyncSession:
    """The database session opened for this request by DatabaseMiddleware."""
    if context.db is None:
        raise RuntimeError("DatabaseMiddleware is not installed")
    return context.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_session_storage(request: Request) -> CookieSessionStorage:
    return request.app.state.session_storage


async def get_auth_session(
    request: Request,
    storage: CookieSessionStorage = Depends(get_session_storage)
) -> AuthSession:
    return await AuthSession.from_request(storage, request)


async def auth_required(
    auth_session: AuthSession = Depends(get_auth_session)
) -> UserSnapshot:
    """
    Dependency that requires a logged-in session user.

    Returns the stored user, or interrupts the request with a redirect
    to the login page.

    Usage:
        @router.get("/private")
        async def private_route(user: UserSnapshot = Depends(auth_required)):
            ...
    """
    user = await auth_session.read_user()

    if user:
        return user

    track_auth_redirect("session")
    raise RedirectRequired(LOGIN_URL)
