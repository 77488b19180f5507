"""
Pydantic schemas shared by the session store and the authenticator.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

SESSION_VERSION = 1


class UserSnapshot(BaseModel):
    """The part of a User kept in the session cookie."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    email: str
    name: str = ""
    image: str = ""
    provider: str


class SessionData(BaseModel):
    """Versioned payload signed into the session cookie."""
    v: int = SESSION_VERSION
    user: Optional[UserSnapshot] = None


class GoogleProfile(BaseModel):
    """External identity returned by the Google strategy."""
    id: str
    display_name: str = ""
    emails: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)

    @property
    def primary_email(self) -> Optional[str]:
        return self.emails[0] if self.emails else None

    @property
    def primary_photo(self) -> Optional[str]:
        return self.photos[0] if self.photos else None

    @classmethod
    def from_userinfo(cls, userinfo: dict) -> "GoogleProfile":
        """Build a profile from OpenID Connect userinfo claims."""
        email = userinfo.get("email")
        picture = userinfo.get("picture")
        return cls(
            id=str(userinfo.get("sub") or userinfo.get("id") or ""),
            display_name=userinfo.get("name") or "",
            emails=[email] if email else [],
            photos=[picture] if picture else [],
        )
