import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.errors import NotFoundError
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.schemas.supplier import SupplierCreate, SupplierUpdate
from hotel_inventory.services.registry import Services

router = APIRouter()
log = logging.getLogger("uvicorn")

can_read = allow(Action.READ, Resource.SUPPLIER)


@router.get("/", response_model=SuccessResponse)
async def list_suppliers_endpoint(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|pending|inactive)$"),
    performance: Optional[str] = Query(None, pattern="^(high|low)$"),
    search: Optional[str] = None,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    suppliers = services.suppliers
    if status_filter:
        result = await suppliers.get_by_status(status_filter)
    elif performance == "high":
        result = await suppliers.get_high_performing_suppliers()
    elif performance == "low":
        result = await suppliers.get_low_performing_suppliers()
    else:
        result = await suppliers.get_all()
    if search:
        hits = {s["id"] for s in await suppliers.search(search)}
        result = [s for s in result if s["id"] in hits]
    return SuccessResponse(data=result)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_supplier_endpoint(
    payload: SupplierCreate,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.CREATE, Resource.SUPPLIER)),
):
    """Registers a supplier. It stays pending until an inventory controller approves it."""
    return SuccessResponse(data=await services.suppliers.create(payload.to_document()))


@router.get("/{supplier_id}", response_model=SuccessResponse)
async def get_supplier_endpoint(supplier_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    supplier = await services.suppliers.get_by_id(supplier_id)
    if supplier is None:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    return SuccessResponse(data=supplier)


@router.patch("/{supplier_id}", response_model=SuccessResponse)
async def update_supplier_endpoint(
    supplier_id: str,
    payload: SupplierUpdate,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.UPDATE, Resource.SUPPLIER)),
):
    return SuccessResponse(data=await services.suppliers.update(supplier_id, payload.to_document()))


@router.delete("/{supplier_id}", response_model=SuccessResponse)
async def delete_supplier_endpoint(
    supplier_id: str,
    services: Services = Depends(get_services),
    _: Identity = Depends(allow(Action.DELETE, Resource.SUPPLIER)),
):
    await services.suppliers.delete(supplier_id)
    return SuccessResponse(data={"id": supplier_id, "deleted": True})


@router.post("/{supplier_id}/approve", response_model=SuccessResponse)
async def approve_supplier_endpoint(
    supplier_id: str,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.APPROVE, Resource.SUPPLIER)),
):
    supplier = await services.suppliers.approve_supplier(supplier_id, identity.user_id)
    log.info(f"Supplier {supplier_id} approved by {identity.user_id}.")
    return SuccessResponse(data=supplier)


@router.get("/{supplier_id}/items", response_model=SuccessResponse)
async def linked_items_endpoint(supplier_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=await services.suppliers.get_linked_items(supplier_id))
