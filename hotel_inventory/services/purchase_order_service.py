import logging
import re
from typing import Any, Dict, List, Optional

from hotel_inventory.core.dates import parse_datetime, utcnow, utcnow_iso
from hotel_inventory.core.errors import InvalidTransitionError, ValidationError
from hotel_inventory.core.policy import Action, Resource, authorize
from hotel_inventory.services.activity_service import ActivityLogService
from hotel_inventory.services.base import CollectionService, matches
from hotel_inventory.store.base import DocumentStore

log = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
IN_TRANSIT = "in-transit"
DELIVERED = "delivered"

# rejected and delivered are terminal
TRANSITIONS = {
    PENDING: {APPROVED, REJECTED},
    APPROVED: {IN_TRANSIT},
    IN_TRANSIT: {DELIVERED},
    REJECTED: set(),
    DELIVERED: set(),
}

TRANSITION_ACTIONS = {
    APPROVED: Action.APPROVE,
    REJECTED: Action.REJECT,
    IN_TRANSIT: Action.SHIP,
    DELIVERED: Action.RECEIVE,
}

RECEIVABLE_STATUSES = (APPROVED, IN_TRANSIT)


def line_item_id(line: Dict[str, Any]) -> Optional[str]:
    """Inventory id of an order line; older orders key it as inventoryItemId or id."""
    return line.get("itemId") or line.get("inventoryItemId") or line.get("id")


def order_total(items: List[Dict[str, Any]]) -> float:
    return sum((line.get("quantity") or 0) * (line.get("unitCost") or 0) for line in items)


def _normalize_lines(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    lines = []
    for line in items:
        item_id = line_item_id(line)
        if not item_id:
            raise ValidationError("Every order line needs an inventory item id")
        quantity = line.get("quantity") or 0
        unit_cost = line.get("unitCost") or 0
        lines.append({
            "itemId": item_id,
            "itemName": line.get("itemName") or "",
            "unit": line.get("unit") or "",
            "quantity": quantity,
            "unitCost": unit_cost,
            "totalCost": quantity * unit_cost,
        })
    return lines


class PurchaseOrderService(CollectionService):
    collection = "purchaseOrders"
    label = "Purchase order"

    def __init__(self, store: DocumentStore, activity: ActivityLogService):
        super().__init__(store)
        self.activity = activity

    async def next_order_number(self, year: Optional[int] = None) -> str:
        year = year or utcnow().year
        pattern = re.compile(rf"^PO-{year}-(\d+)$")
        seq = 0
        for order in await self.get_all():
            m = pattern.match(order.get("orderNumber") or "")
            if m:
                seq = max(seq, int(m.group(1)))
        return f"PO-{year}-{seq + 1:03d}"

    # ----------- CRUD with audit trail -----------

    async def create(
        self,
        data: Dict[str, Any],
        requested_by: Optional[str] = None,
        user_role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """New orders always start pending, whatever status the caller sent."""
        items = _normalize_lines(data.get("items") or [])
        if not items:
            raise ValidationError("Purchase order must contain items.")
        if not (data.get("supplier") or {}).get("name"):
            raise ValidationError("Purchase order needs a supplier")

        now = utcnow_iso()
        doc = {
            **data,
            "items": items,
            "orderNumber": data.get("orderNumber") or await self.next_order_number(),
            "status": PENDING,
            "priority": data.get("priority") or "normal",
            "totalAmount": order_total(items),
            "requestedBy": requested_by or data.get("requestedBy"),
            "statusHistory": [
                {"status": PENDING, "reason": "Order created", "changedBy": requested_by, "changedAt": now},
            ],
        }
        order = await super().create(doc)
        await self.activity.log(
            "CREATE_PO", "purchase-order", order["id"], order["orderNumber"],
            "Manual purchase order creation", user_role,
        )
        return order

    async def update(self, order_id: str, patch: Dict[str, Any], user_role: Optional[str] = None) -> Dict[str, Any]:
        """Edits order details. Status changes go through ``transition`` only."""
        current = await self.require(order_id)
        patch = dict(patch)
        if "status" in patch or "statusHistory" in patch:
            raise ValidationError("Order status can only change through a status transition")
        if current.get("status") in (REJECTED, DELIVERED):
            raise ValidationError(f"Order {current.get('orderNumber')} is {current['status']} and can no longer be edited")
        if "items" in patch:
            patch["items"] = _normalize_lines(patch["items"] or [])
            if not patch["items"]:
                raise ValidationError("Purchase order must contain items.")
            patch["totalAmount"] = order_total(patch["items"])
        order = await super().update(order_id, patch)
        await self.activity.log(
            "UPDATE_PO", "purchase-order", order_id, current.get("orderNumber") or order_id,
            "PO updated: data changed", user_role,
        )
        return order

    async def delete(self, order_id: str, user_role: Optional[str] = None) -> bool:
        current = await self.require(order_id)
        await super().delete(order_id)
        await self.activity.log(
            "DELETE_PO", "purchase-order", order_id, current.get("orderNumber"),
            "Manual purchase order deletion", user_role,
        )
        return True

    # ----------- Status state machine -----------

    async def _apply_status(
        self,
        order: Dict[str, Any],
        new_status: str,
        changed_by: Optional[str],
        reason: str,
        extra: Optional[Dict[str, Any]] = None,
        user_role: Optional[str] = None,
    ) -> Dict[str, Any]:
        now = utcnow_iso()
        history = list(order.get("statusHistory") or [])
        history.append({"status": new_status, "reason": reason, "changedBy": changed_by, "changedAt": now})

        patch = {"status": new_status, "statusHistory": history, "updatedAt": now}
        if new_status == APPROVED:
            patch.update(approvedAt=now, approvedBy=changed_by)
        elif new_status == REJECTED:
            patch.update(rejectedAt=now, rejectedBy=changed_by)
        elif new_status == IN_TRANSIT:
            patch["shippedAt"] = now
        elif new_status == DELIVERED:
            patch["receivedAt"] = now
        patch.update(extra or {})

        await self.store.update(self._path(order["id"]), patch)
        log.info(f"Purchase order {order.get('orderNumber')} moved {order.get('status')} -> {new_status}")
        await self.activity.log(
            "UPDATE_PO", "purchase-order", order["id"], order.get("orderNumber") or order["id"],
            f"PO updated: {new_status}", user_role,
        )
        return await self.get_by_id(order["id"])

    async def transition(
        self,
        order_id: str,
        new_status: str,
        role,
        changed_by: Optional[str] = None,
        reason: str = "",
    ) -> Dict[str, Any]:
        """
        Moves an order one step along pending -> approved -> in-transit -> delivered,
        or pending -> rejected. Appends exactly one statusHistory entry.
        """
        order = await self.require(order_id)
        new_status = getattr(new_status, "value", new_status)
        action = TRANSITION_ACTIONS.get(new_status)
        if action is None:
            raise InvalidTransitionError(f"Unknown purchase order status '{new_status}'")
        authorize(role, action, Resource.PURCHASE_ORDER)

        current = order.get("status") or PENDING
        if new_status not in TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                f"Cannot move order {order.get('orderNumber')} from {current} to {new_status}",
                details={"from": current, "to": new_status},
            )
        return await self._apply_status(
            order, new_status, changed_by, reason or f"Order {new_status}", user_role=role,
        )

    async def mark_received(
        self,
        order_id: str,
        actual_total: float,
        role,
        changed_by: Optional[str] = None,
        reason: str = "",
    ) -> Dict[str, Any]:
        """Delivery through the receiving flow; allowed from approved as well as in-transit."""
        order = await self.require(order_id)
        authorize(role, Action.RECEIVE, Resource.PURCHASE_ORDER)
        if order.get("status") not in RECEIVABLE_STATUSES:
            raise InvalidTransitionError(
                f"Order {order.get('orderNumber')} is {order.get('status')}; only approved or in-transit orders can be received",
                details={"from": order.get("status"), "to": DELIVERED},
            )
        return await self._apply_status(
            order, DELIVERED, changed_by, reason,
            extra={"actualTotalAmount": actual_total}, user_role=role,
        )

    # ----------- Queries -----------

    async def get_by_status(self, status: str) -> List[Dict[str, Any]]:
        status = getattr(status, "value", status)
        return [o for o in await self.get_all() if o.get("status") == status]

    async def get_pending_orders(self) -> List[Dict[str, Any]]:
        return await self.get_by_status(PENDING)

    async def get_approved_orders(self) -> List[Dict[str, Any]]:
        return await self.get_by_status(APPROVED)

    async def get_by_priority(self, priority: str) -> List[Dict[str, Any]]:
        priority = getattr(priority, "value", priority)
        return [o for o in await self.get_all() if o.get("priority") == priority]

    async def get_overdue_orders(self) -> List[Dict[str, Any]]:
        now = utcnow()
        out = []
        for order in await self.get_all():
            expected = parse_datetime(order.get("expectedDelivery"))
            if order.get("status") != DELIVERED and expected is not None and expected < now:
                out.append(order)
        return out

    async def search(self, query: str) -> List[Dict[str, Any]]:
        out = []
        for order in await self.get_all():
            supplier = order.get("supplier") or {}
            if matches(query, order.get("orderNumber"), supplier.get("name"),
                       supplier.get("contactPerson"), order.get("status")):
                out.append(order)
        return out
