import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.config import DEFAULT_EXPIRY_WINDOW_DAYS
from hotel_inventory.core.errors import NotFoundError
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.inventory import InventoryItemCreate, InventoryItemUpdate, StockChangeRequest
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.services.inventory_service import stock_status
from hotel_inventory.services.registry import Services

router = APIRouter()
log = logging.getLogger("uvicorn")

can_read = allow(Action.READ, Resource.INVENTORY)


def _with_status(item):
    return {**item, "stockStatus": stock_status(item)}


@router.get("/", response_model=SuccessResponse)
async def list_items_endpoint(
    category: Optional[str] = None,
    low_stock: bool = False,
    search: Optional[str] = None,
    supplier: Optional[str] = None,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    """Lists inventory items, optionally filtered."""
    inventory = services.inventory
    if search:
        items = await inventory.search(search)
    elif supplier:
        items = await inventory.get_items_by_supplier(supplier)
    else:
        items = await inventory.get_all()
    if category:
        items = [i for i in items if i.get("category") == category]
    if low_stock:
        items = [i for i in items if (i.get("currentStock") or 0) <= (i.get("restockThreshold") or 0)]
    return SuccessResponse(data=[_with_status(i) for i in items])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_item_endpoint(
    payload: InventoryItemCreate,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.CREATE, Resource.INVENTORY)),
):
    item = await services.inventory.create(payload.to_document(), user_role=identity.role)
    log.info(f"Inventory item {item['id']} created by {identity.user_id}.")
    return SuccessResponse(data=_with_status(item))


@router.get("/low-stock", response_model=SuccessResponse)
async def low_stock_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=[_with_status(i) for i in await services.inventory.get_low_stock_items()])


@router.get("/critical", response_model=SuccessResponse)
async def critical_stock_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=[_with_status(i) for i in await services.inventory.get_critical_stock_items()])


@router.get("/expiring", response_model=SuccessResponse)
async def expiring_items_endpoint(
    days: int = Query(DEFAULT_EXPIRY_WINDOW_DAYS, ge=0),
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    return SuccessResponse(data=await services.inventory.get_expiring_items(days))


@router.get("/expired", response_model=SuccessResponse)
async def expired_items_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=await services.inventory.get_expired_items())


@router.get("/transactions", response_model=SuccessResponse)
async def transactions_endpoint(
    item_id: Optional[str] = None,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    """Stock movement history, newest first."""
    return SuccessResponse(data=await services.inventory.get_transactions(item_id))


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_item_endpoint(item_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    item = await services.inventory.get_by_id(item_id)
    if item is None:
        raise NotFoundError(f"Inventory item {item_id} not found")
    return SuccessResponse(data=_with_status(item))


@router.patch("/{item_id}", response_model=SuccessResponse)
async def update_item_endpoint(
    item_id: str,
    payload: InventoryItemUpdate,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.UPDATE, Resource.INVENTORY)),
):
    item = await services.inventory.update(item_id, payload.to_document(), user_role=identity.role)
    return SuccessResponse(data=_with_status(item))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item_endpoint(
    item_id: str,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.DELETE, Resource.INVENTORY)),
):
    await services.inventory.delete(item_id, user_role=identity.role)
    log.info(f"Inventory item {item_id} deleted by {identity.user_id}.")
    return SuccessResponse(data={"id": item_id, "deleted": True})


@router.get("/{item_id}/batches", response_model=SuccessResponse)
async def batches_endpoint(item_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    await services.inventory.require(item_id)
    return SuccessResponse(data=await services.inventory.get_batches(item_id))


@router.post("/{item_id}/stock", response_model=SuccessResponse)
async def stock_movement_endpoint(
    item_id: str,
    payload: StockChangeRequest,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.UPDATE, Resource.INVENTORY)),
):
    """
    Records a stock movement. With a batch number the movement targets that batch;
    otherwise batch-tracked items are drawn down earliest-expiry first.
    """
    body = payload.to_document()
    transaction = {
        "reason": payload.reason,
        "notes": payload.notes,
        "type": payload.type,
        "performedBy": identity.user_id,
    }
    if payload.batch_number:
        result = await services.inventory.update_batch_stock(
            item_id,
            {"batchNumber": payload.batch_number, "expirationDate": body.get("expirationDate")},
            payload.change,
            transaction,
        )
    else:
        result = await services.inventory.update_stock(item_id, payload.change, transaction)
    log.info(f"Stock of {item_id} changed by {payload.change} ({payload.reason}).")
    return SuccessResponse(data=result)
