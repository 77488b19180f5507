"""
Per-request context.

Created by RequestContextMiddleware and passed to handlers through the
get_context dependency.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request


@dataclass
class AuthIdentity:
    """A verified identity; source is "session" or "bearer"."""
    user_id: str
    source: str
    email: Optional[str] = None


@dataclass
class RequestContext:
    request_id: str
    db: Optional[AsyncSession] = None
    auth: Optional[AuthIdentity] = None
    user_id: Optional[str] = None


def context_from(request: Request) -> RequestContext:
    """Return the context bound to this request."""
    context = getattr(request.state, "context", None)
    if context is None:
        raise RuntimeError("RequestContextMiddleware is not installed")
    return context
