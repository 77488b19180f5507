"""
Script to create all database tables.

Creates the tables defined in the models against DATABASE_URL.
Use Alembic for anything beyond a local database.
"""
import asyncio
from app.config import settings
from app.database import create_engine
from app.models.base import Base
from app.models.user import User  # noqa: F401 - registers the table


async def create_all_tables(engine):
    """Create all tables in the database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("All tables created successfully!")


async def drop_all_tables(engine):
    """Drop all tables in the database (for testing)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    print("All tables dropped!")


async def main():
    """Main entry point."""
    engine = create_engine(settings.DATABASE_URL)
    print("Creating database tables...")
    await create_all_tables(engine)
    await engine.dispose()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
