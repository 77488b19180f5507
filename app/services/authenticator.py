"""
Login orchestration.

The Authenticator hands the request to a login strategy and turns the
returned external profile into a local User row.
"""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request
from starlette.responses import Response

from app.config import Settings
from app.exceptions import (
    AuthConfigurationError,
    MissingEmailError,
    UnknownStrategyError,
    UserCreationError,
)
from app.logging_config import get_logger
from app.routes.metrics import track_login
from app.models.user import User
from app.oauth import GoogleStrategy
from app.schemas import GoogleProfile
from app.services.user_service import UserService

logger = get_logger(component="authenticator")

REQUIRED_SETTINGS = ("SESSION_SECRET", "GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "CLIENT_URL")


class LoginStrategy(Protocol):
    name: str

    async def challenge(self, request: Request) -> Response: ...

    async def fetch_profile(self, request: Request) -> GoogleProfile: ...


class Authenticator:
    """
    Orchestrates login strategies and user lookup-or-create.

    Construction fails immediately if any required setting is missing.
    """

    def __init__(self, settings: Settings):
        if not all(getattr(settings, name) for name in REQUIRED_SETTINGS):
            raise AuthConfigurationError(
                f"{', '.join(REQUIRED_SETTINGS)} are not all defined"
            )

        self.strategies: dict[str, LoginStrategy] = {}
        self.use(
            GoogleStrategy(
                client_id=settings.GOOGLE_CLIENT_ID,
                client_secret=settings.GOOGLE_CLIENT_SECRET,
                redirect_uri=f"{settings.CLIENT_URL.rstrip('/')}/auth/google/callback",
            )
        )

    def use(self, strategy: LoginStrategy) -> "Authenticator":
        """Register a strategy under its name, replacing any previous one."""
        self.strategies[strategy.name] = strategy
        return self

    def get_strategy(self, name: str) -> LoginStrategy:
        try:
            return self.strategies[name]
        except KeyError:
            raise UnknownStrategyError(f"No login strategy named {name!r}") from None

    async def challenge(self, name: str, request: Request) -> Response:
        """Start the login flow for a strategy."""
        return await self.get_strategy(name).challenge(request)

    async def authenticate(self, name: str, request: Request, db: AsyncSession) -> User:
        """
        Complete the login flow and return the local user.

        Args:
            name: Strategy name (e.g. "google")
            request: The callback request
            db: Database session for the lookup-or-create

        Returns:
            Existing or newly created User
        """
        profile = await self.get_strategy(name).fetch_profile(request)
        return await self.verify(profile, db)

    async def verify(self, profile: GoogleProfile, db: AsyncSession) -> User:
        """
        Find the user for a profile by email, creating one on first login.

        Existing users are returned unchanged; profile fields are not synced.
        A profile without an email is refused before any lookup.
        """
        email = profile.primary_email
        if not email:
            logger.warning("login_without_email", provider_id=profile.id)
            raise MissingEmailError("The login provider returned no email address")

        user_service = UserService(db)

        user = await user_service.get_by_email(email)
        if user:
            logger.info("login_existing_user", user_id=user.user_id)
            track_login("existing")
            return user

        new_user = await user_service.create(
            user_id=profile.id,
            email=email,
            password="",
            name=profile.display_name,
            image=profile.primary_photo or "",
            provider="google",
        )

        if not new_user:
            logger.error("user_creation_failed", provider_id=profile.id)
            raise UserCreationError("Failed to create a new user")

        logger.info("login_created_user", user_id=new_user.user_id)
        track_login("created")
        return new_user
