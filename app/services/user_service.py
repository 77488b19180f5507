"""
User lookup and creation.
"""
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User


class UserService:
    """Service for reading and creating users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """
        Get the first user with this email.

        Args:
            email: User email address

        Returns:
            User or None if not found
        """
        stmt = select(User).where(User.email == email).limit(1)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def create(
        self,
        user_id: str,
        email: str,
        name: str,
        image: str,
        provider: str,
        password: str = ""
    ) -> User | None:
        """
        Insert a new user and return the created row.

        Args:
            user_id: Provider-assigned identifier
            email: User email address
            name: Display name
            image: Avatar URL
            provider: Login provider tag (e.g. "google")
            password: Empty for OAuth accounts

        Returns:
            The inserted User, or None if the insert returned no row
        """
        stmt = (
            insert(User)
            .values(
                user_id=user_id,
                email=email,
                password=password,
                name=name,
                image=image,
                provider=provider,
            )
            .returning(User)
        )
        result = await self.db.execute(stmt)
        user = result.scalars().first()
        await self.db.commit()
        return user
