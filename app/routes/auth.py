"""
Authentication routes for Google OAuth.

SECURITY: Only the callback writes the session cookie, and only after
Authlib has validated the OAuth state and tokens.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import RedirectResponse

from app.config import Settings
from app.dependencies.auth import get_auth_session, get_authenticator, get_db, get_settings
from app.logging_config import get_logger
from app.routes.metrics import track_logout
from app.services.authenticator import Authenticator
from app.services.session_store import AuthSession

router = APIRouter(tags=["Authentication"])

logger = get_logger(component="auth_routes")

LOGIN_PAGE = """<!DOCTYPE html>
<html>
  <head><title>Log in</title></head>
  <body>
    <div>
      <form method="post" action="/auth/google">
        <button type="submit">Log in with Google</button>
      </form>
    </div>
  </body>
</html>
"""


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    """Render the login form."""
    return HTMLResponse(LOGIN_PAGE)


@router.post("/auth/google")
async def login_google(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator)
):
    """
    Redirect user to Google OAuth login page.
    """
    return await authenticator.challenge("google", request)


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    db: AsyncSession = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator),
    auth_session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_settings)
):
    """
    Handle Google OAuth callback.

    Finds or creates the user, stores it in the session cookie and
    redirects to the landing page.
    """
    user = await authenticator.authenticate("google", request, db)

    logger.info("session_started", user_id=user.user_id)
    headers = await auth_session.write_user(user)
    return RedirectResponse(settings.LOGIN_REDIRECT_URL, status_code=302, headers=headers)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(auth_session: AuthSession = Depends(get_auth_session)):
    """
    Destroy the session and go home.

    Works the same with or without an active session.
    """
    headers = await auth_session.clear()
    logger.info("session_cleared")
    track_logout()
    return RedirectResponse("/", status_code=302, headers=headers)
