import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.errors import NotFoundError
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.menu import AvailabilityUpdate, MenuItemCreate, MenuItemUpdate
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.services.registry import Services

router = APIRouter()
log = logging.getLogger("uvicorn")

can_read = allow(Action.READ, Resource.MENU)


@router.get("/", response_model=SuccessResponse)
async def list_menu_endpoint(
    available: Optional[bool] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    menu = services.menu
    items = await (menu.search(search) if search else menu.get_all())
    if available is not None:
        items = [m for m in items if bool(m.get("isAvailable")) == available]
    if category:
        items = [m for m in items if m.get("category") == category]
    return SuccessResponse(data=items)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_menu_item_endpoint(
    payload: MenuItemCreate,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.CREATE, Resource.MENU)),
):
    return SuccessResponse(data=await services.menu.create(payload.to_document()))


@router.get("/alerts", response_model=SuccessResponse)
async def menu_alerts_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    """Dishes grouped by ingredient problem: out-of-stock, low-stock, expired."""
    return SuccessResponse(data=await services.menu.get_affected_items())


@router.post("/refresh-availability", response_model=SuccessResponse)
async def refresh_availability_endpoint(
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.UPDATE, Resource.MENU)),
):
    changed = await services.menu.refresh_availability()
    log.info(f"Menu availability refreshed, {len(changed)} item(s) changed.")
    return SuccessResponse(data=changed)


@router.post("/initialize", response_model=SuccessResponse)
async def initialize_menu_endpoint(
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.CREATE, Resource.MENU)),
):
    return SuccessResponse(data={"created": await services.menu.initialize_default_menu_items()})


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(item_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    item = await services.menu.get_by_id(item_id)
    if item is None:
        raise NotFoundError(f"Menu item {item_id} not found")
    return SuccessResponse(data=item)


@router.patch("/{item_id}", response_model=SuccessResponse)
async def update_menu_item_endpoint(
    item_id: str,
    payload: MenuItemUpdate,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.UPDATE, Resource.MENU)),
):
    return SuccessResponse(data=await services.menu.update(item_id, payload.to_document()))


@router.patch("/{item_id}/availability", response_model=SuccessResponse)
async def availability_endpoint(
    item_id: str,
    payload: AvailabilityUpdate,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.UPDATE, Resource.MENU)),
):
    return SuccessResponse(data=await services.menu.update_availability(item_id, payload.is_available))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(
    item_id: str,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.DELETE, Resource.MENU)),
):
    await services.menu.delete(item_id)
    return SuccessResponse(data={"id": item_id, "deleted": True})
