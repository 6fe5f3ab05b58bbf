import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hotel_inventory.api.deps import Identity, allow, get_services
from hotel_inventory.core.errors import NotFoundError
from hotel_inventory.core.policy import Action, Resource
from hotel_inventory.schemas.purchase_order import (
    EmailRequest,
    Priority,
    PurchaseOrderCreate,
    PurchaseOrderStatus,
    PurchaseOrderUpdate,
    StatusChangeRequest,
)
from hotel_inventory.schemas.receiving import ReceiveRequest
from hotel_inventory.schemas.response import SuccessResponse
from hotel_inventory.services.registry import Services

router = APIRouter()
log = logging.getLogger("uvicorn")

can_read = allow(Action.READ, Resource.PURCHASE_ORDER)


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = None,
    search: Optional[str] = None,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    """Lists purchase orders. ``status``, ``priority`` and ``search`` combine."""
    orders = await (services.purchase_orders.search(search) if search else services.purchase_orders.get_all())
    if status_filter:
        orders = [o for o in orders if o.get("status") == status_filter.value]
    if priority:
        orders = [o for o in orders if o.get("priority") == priority.value]
    return SuccessResponse(data=orders)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(
    payload: PurchaseOrderCreate,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.CREATE, Resource.PURCHASE_ORDER)),
):
    """Creates a purchase order. It always starts as pending."""
    order = await services.purchase_orders.create(
        payload.to_document(), requested_by=identity.user_id, user_role=identity.role,
    )
    log.info(f"Purchase order {order['orderNumber']} requested by {identity.user_id}.")
    return SuccessResponse(data=order)


@router.get("/overdue", response_model=SuccessResponse)
async def overdue_orders_endpoint(services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    return SuccessResponse(data=await services.purchase_orders.get_overdue_orders())


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: str, services: Services = Depends(get_services), _: Identity = Depends(can_read)):
    order = await services.purchase_orders.get_by_id(order_id)
    if order is None:
        raise NotFoundError(f"Purchase order {order_id} not found")
    return SuccessResponse(data=order)


@router.patch("/{order_id}", response_model=SuccessResponse)
async def update_order_endpoint(
    order_id: str,
    payload: PurchaseOrderUpdate,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.UPDATE, Resource.PURCHASE_ORDER)),
):
    order = await services.purchase_orders.update(order_id, payload.to_document(), user_role=identity.role)
    return SuccessResponse(data=order)


@router.delete("/{order_id}", response_model=SuccessResponse)
async def delete_order_endpoint(
    order_id: str,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.DELETE, Resource.PURCHASE_ORDER)),
):
    await services.purchase_orders.delete(order_id, user_role=identity.role)
    return SuccessResponse(data={"id": order_id, "deleted": True})


@router.post("/{order_id}/status", response_model=SuccessResponse)
async def change_status_endpoint(
    order_id: str,
    payload: StatusChangeRequest,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.READ, Resource.PURCHASE_ORDER)),
):
    """
    Moves the order one step along its lifecycle. The permission needed depends on
    the target status, so the check happens inside the service.
    """
    order = await services.purchase_orders.transition(
        order_id, payload.status.value, identity.role,
        changed_by=identity.user_id, reason=payload.reason,
    )
    return SuccessResponse(data=order)


@router.get("/{order_id}/receiving-preview", response_model=SuccessResponse)
async def receiving_preview_endpoint(
    order_id: str,
    services: Services = Depends(get_services),
    _: Identity = Depends(can_read),
):
    """Default receiving lines for the order: full quantities, generated batch numbers."""
    session = await services.receiving.open_session(order_id)
    return SuccessResponse(data=session.to_dict())


@router.post("/{order_id}/receive", response_model=SuccessResponse)
async def receive_order_endpoint(
    order_id: str,
    payload: ReceiveRequest,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.RECEIVE, Resource.PURCHASE_ORDER)),
):
    """
    Receives goods against the order: adds batch stock per line, marks the order
    delivered and returns the printable receiving note as ``receiptHtml``.
    """
    edits = [line.model_dump(mode="json", exclude_unset=True) for line in payload.lines]
    result = await services.receiving.receive(
        order_id, edits, identity.role, performed_by=identity.user_id,
    )
    return SuccessResponse(data=result)


@router.post("/{order_id}/email", response_model=SuccessResponse)
async def email_order_endpoint(
    order_id: str,
    payload: EmailRequest,
    services: Services = Depends(get_services),
    identity: Identity = Depends(allow(Action.EMAIL, Resource.PURCHASE_ORDER)),
):
    result = await services.email.send_purchase_order(
        order_id, identity.role,
        custom_subject=payload.custom_subject,
        custom_content=payload.custom_content,
        message=payload.message,
    )
    return SuccessResponse(data=result)
