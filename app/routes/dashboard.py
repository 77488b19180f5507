"""
Dashboard routes.

DashboardAuthMiddleware has already turned away requests without a
verified identity; these handlers additionally need the session user.
"""
from fastapi import APIRouter, Depends

from app.context import RequestContext
from app.dependencies.auth import auth_required, get_context
from app.schemas import UserSnapshot

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/")
async def dashboard(
    user: UserSnapshot = Depends(auth_required),
    context: RequestContext = Depends(get_context)
):
    """Landing page after login."""
    return {
        "user_id": context.user_id,
        "user": user.model_dump(),
    }
