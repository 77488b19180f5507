"""
JWT token service for bearer identities.

Tokens carry the provider user id in "sub" and are checked by the
auth-resolution middleware.
"""
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt


class JWTService:
    """Service for creating and verifying JWT tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes

    def create_token(self, user_id: str, email: str) -> str:
        """
        Create a JWT token for a user.

        Args:
            user_id: Provider-assigned user id
            email: User's email

        Returns:
            Encoded JWT token string
        """
        expires = datetime.now(timezone.utc) + timedelta(minutes=self.expiration_minutes)

        payload = {
            "sub": user_id,
            "email": email,
            "exp": expires
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict | None:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded payload dict or None if invalid
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
        except JWTError:
            return None

        if not payload.get("sub"):
            return None
        return payload
