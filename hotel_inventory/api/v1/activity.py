from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.services.registry import Services

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_activity_endpoint(
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.READ, Resource.ACTIVITY)),
):
    """Audit trail, newest first."""
    if entity_type:
        entries = await services.activity.get_by_entity(entity_type, entity_id)
        entries = entries[:limit] if limit else entries
    else:
        entries = await services.activity.get_all(limit)
    return SuccessResponse(data=entries)
