"""
Database session injection.
"""
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.context import context_from


class DatabaseMiddleware(BaseHTTPMiddleware):
    """Open one AsyncSession per request and put it on the request context."""

    def __init__(self, app: ASGIApp, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(app)
        self.session_factory = session_factory

    async def dispatch(self, request: Request, call_next):
        context = context_from(request)

        async with self.session_factory() as db:
            context.db = db
            try:
                return await call_next(request)
            finally:
                context.db = None
