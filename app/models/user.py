"""
User model.

Represents an account created through an external login provider.
"""
import uuid
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    User model keyed by email.

    OAuth-created accounts carry an empty password and the provider's own
    identifier in user_id.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    provider: Mapped[str] = mapped_column(String(32), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, provider={self.provider})>"
