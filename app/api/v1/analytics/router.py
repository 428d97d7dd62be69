from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.store import SqlRecordStore, get_store

from . import service
from .schemas import ClassAnalytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("", response_model=ClassAnalytics)
async def get_analytics(
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> ClassAnalytics:
    """Class summary for the dashboard. Recomputed from current records on every call."""
    return await service.get_analytics(store, current_user.id)
