"""
Exceptions raised by the authentication layer.
"""
from typing import Mapping, Optional


class AuthError(Exception):
    """Base class for authentication errors."""
    status_code = 500


class AuthConfigurationError(AuthError):
    """Required login settings are missing."""


class UserCreationError(AuthError):
    """Inserting a new user returned no row."""


class UnknownStrategyError(AuthError):
    """No login strategy is registered under the requested name."""


class MissingEmailError(AuthError):
    """The provider profile carries no email to key the account on."""
    status_code = 400


class RedirectRequired(Exception):
    """
    Stop handling the request and answer with a redirect.

    Raised by guards; the application turns it into a 302 response.
    """

    def __init__(self, url: str, headers: Optional[Mapping[str, str]] = None):
        super().__init__(url)
        self.url = url
        self.headers = dict(headers or {})
