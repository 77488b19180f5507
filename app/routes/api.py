"""
API routes.

Requests here pass through APIAuthMiddleware, which applies no policy yet.
"""
from fastapi import APIRouter, Depends

from app.context import RequestContext
from app.dependencies.auth import get_context

router = APIRouter(prefix="/api", tags=["API"])


@router.get("/me")
async def whoami(context: RequestContext = Depends(get_context)):
    """
    Return the identity resolved for this request, if any.
    """
    if not context.auth:
        return {"user_id": None, "source": None}

    return {
        "user_id": context.auth.user_id,
        "source": context.auth.source,
    }
