"""
Google OAuth 2.0 login strategy.

SECURITY: This module handles OAuth authentication. Token exchange and
ID token validation are left to Authlib.
"""
from authlib.integrations.starlette_client import OAuth
from starlette.requests import Request
from starlette.responses import Response

from app.schemas import GoogleProfile

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"


class GoogleStrategy:
    """Runs the Google redirect dance and returns the user's profile."""

    name = "google"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str):
        self.redirect_uri = redirect_uri

        # Create OAuth registry
        self.oauth = OAuth()

        # Register Google OAuth client
        self.oauth.register(
            name=self.name,
            client_id=client_id,
            client_secret=client_secret,
            server_metadata_url=GOOGLE_METADATA_URL,
            client_kwargs={
                "scope": "openid email profile"
            }
        )

    @property
    def client(self):
        return self.oauth.create_client(self.name)

    async def challenge(self, request: Request) -> Response:
        """Redirect the browser to Google's consent screen."""
        return await self.client.authorize_redirect(request, self.redirect_uri)

    async def fetch_profile(self, request: Request) -> GoogleProfile:
        """Exchange the callback code for tokens and read the profile."""
        token = await self.client.authorize_access_token(request)

        userinfo = token.get("userinfo")
        if not userinfo:
            userinfo = await self.client.userinfo(token=token)

        return GoogleProfile.from_userinfo(dict(userinfo))
