"""Purchase-order receiving and stock reconciliation.

``ReceivingSession`` holds the operator's per-line edits for one order.
``ReceivingService.receive`` applies them as a saga: batch stock is added line
by line, and if any step fails every line already applied is reversed with an
equal negative batch movement before the error is raised. A line that fails
part way through its own writes is undone by the stock movement itself. The
order is only marked delivered after all stock writes succeed.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from hotel_inventory.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    ReceivingError,
    StockRollbackError,
    ValidationError,
)
from hotel_inventory.core.policy import Action, Resource, authorize
from hotel_inventory.services.inventory_service import InventoryService
from hotel_inventory.services.purchase_order_service import (
    RECEIVABLE_STATUSES,
    PurchaseOrderService,
    line_item_id,
)
from hotel_inventory.services.receipt import format_currency, format_quantity, render_receipt

log = logging.getLogger(__name__)

RECEIPT_REASON = "po-receipt"
REVERSAL_REASON = "po-receipt-reversal"
RECEIVING_FAILED_MESSAGE = "Error processing receipt. Some items might not have been updated."


@dataclass
class ReceivingLine:
    line_id: int
    item_id: str
    item_name: str
    unit: str
    ordered_quantity: float
    received_quantity: float
    unit_cost: float
    batch_number: str
    expiration_date: Optional[str] = None
    is_checked: bool = True

    @property
    def discrepancy(self) -> float:
        """Signed: negative means less arrived than ordered."""
        return self.received_quantity - self.ordered_quantity

    @property
    def shortage(self) -> float:
        return self.ordered_quantity - self.received_quantity

    @property
    def badge(self) -> Optional[str]:
        if not self.is_checked:
            return None
        if self.shortage > 0:
            return f"Short by {format_quantity(self.shortage)}"
        if self.shortage < 0:
            return f"Extra +{format_quantity(abs(self.shortage))}"
        return None

    @property
    def line_cost(self) -> float:
        return self.received_quantity * self.unit_cost

    @property
    def is_received(self) -> bool:
        return self.is_checked and self.received_quantity > 0

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out.update(
            discrepancy=self.discrepancy,
            badge=self.badge,
            line_cost=self.line_cost,
        )
        return out


class ReceivingSession:
    """Per-line receiving state for one purchase order. Totals are derived on every read."""

    def __init__(self, order: Dict[str, Any]):
        self.order = order
        order_number = order.get("orderNumber") or order.get("id")
        self.lines: List[ReceivingLine] = []
        for index, item in enumerate(order.get("items") or []):
            quantity = item.get("quantity") or 0
            self.lines.append(ReceivingLine(
                line_id=index,
                item_id=line_item_id(item),
                item_name=item.get("itemName") or item.get("name") or "",
                unit=item.get("unit") or item.get("itemUnit") or "",
                ordered_quantity=quantity,
                received_quantity=quantity,
                unit_cost=item.get("unitCost") or item.get("unitPrice") or 0,
                batch_number=f"BAT-{order_number}-{index + 1}",
            ))

    def line(self, line_id: int) -> ReceivingLine:
        if not 0 <= line_id < len(self.lines):
            raise ValidationError(f"Order has no line {line_id}", details={"lineId": line_id})
        return self.lines[line_id]

    def toggle(self, line_id: int) -> ReceivingLine:
        line = self.line(line_id)
        line.is_checked = not line.is_checked
        return line

    def set_received_quantity(self, line_id: int, quantity) -> ReceivingLine:
        try:
            quantity = float(quantity)
        except (TypeError, ValueError):
            raise ValidationError(f"Received quantity must be a number, got {quantity!r}")
        if quantity < 0:
            raise ValidationError("Received quantity cannot be negative")
        line = self.line(line_id)
        line.received_quantity = quantity
        return line

    def set_batch_number(self, line_id: int, batch_number: str) -> ReceivingLine:
        if not (batch_number or "").strip():
            raise ValidationError("Batch number cannot be empty")
        line = self.line(line_id)
        line.batch_number = batch_number.strip()
        return line

    def set_expiration_date(self, line_id: int, expiration_date: Optional[str]) -> ReceivingLine:
        line = self.line(line_id)
        line.expiration_date = expiration_date or None
        return line

    def apply_edits(self, edits: Iterable[Dict[str, Any]]) -> None:
        """Edits use the request shape: line_id plus any of is_checked, received_quantity, batch_number, expiration_date."""
        for edit in edits:
            line_id = edit["line_id"]
            if edit.get("is_checked") is not None:
                self.line(line_id).is_checked = bool(edit["is_checked"])
            if edit.get("received_quantity") is not None:
                self.set_received_quantity(line_id, edit["received_quantity"])
            if edit.get("batch_number") is not None:
                self.set_batch_number(line_id, edit["batch_number"])
            if edit.get("expiration_date") is not None:
                self.set_expiration_date(line_id, edit["expiration_date"])

    @property
    def received_lines(self) -> List[ReceivingLine]:
        return [line for line in self.lines if line.is_received]

    @property
    def verified_total(self) -> float:
        return sum(line.line_cost for line in self.received_lines)

    @property
    def has_discrepancies(self) -> bool:
        return any(line.discrepancy != 0 for line in self.received_lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order.get("id"),
            "orderNumber": self.order.get("orderNumber"),
            "lines": [line.to_dict() for line in self.lines],
            "verifiedTotal": self.verified_total,
        }


class ReceivingService:
    def __init__(self, inventory: InventoryService, purchase_orders: PurchaseOrderService):
        self.inventory = inventory
        self.purchase_orders = purchase_orders

    async def open_session(self, order_id: str) -> ReceivingSession:
        order = await self.purchase_orders.require(order_id)
        if order.get("status") not in RECEIVABLE_STATUSES:
            raise InvalidTransitionError(
                f"Order {order.get('orderNumber')} is {order.get('status')}; only approved or in-transit orders can be received",
            )
        return ReceivingSession(order)

    async def receive(
        self,
        order_id: str,
        edits: Iterable[Dict[str, Any]],
        role,
        performed_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        authorize(role, Action.RECEIVE, Resource.PURCHASE_ORDER)
        session = await self.open_session(order_id)
        session.apply_edits(edits)
        order = session.order
        order_number = order.get("orderNumber")
        total = session.verified_total

        applied: List[ReceivingLine] = []
        # Lines whose stock landed but could not be undone inside the movement itself
        stranded: List[int] = []
        try:
            # --- 1. Batch stock, one line at a time ---
            for line in session.received_lines:
                if not line.item_id:
                    raise NotFoundError(f"Line {line.line_id} of {order_number} has no inventory item")
                try:
                    await self.inventory.update_batch_stock(
                        line.item_id,
                        {"batchNumber": line.batch_number, "expirationDate": line.expiration_date},
                        line.received_quantity,
                        {
                            "reason": RECEIPT_REASON,
                            "orderNumber": order_number,
                            "notes": f"Received from PO {order_number}. Discrepancy: {format_quantity(line.discrepancy)}",
                            "performedBy": performed_by,
                        },
                    )
                except StockRollbackError:
                    stranded.append(line.line_id)
                    raise
                applied.append(line)

            # --- 2. Order status, once every line is in ---
            if session.has_discrepancies:
                reason = f"Received with discrepancies. Adjusted Total: {format_currency(total)}"
            else:
                reason = f"Received in full. Total: {format_currency(total)}"
            updated = await self.purchase_orders.mark_received(
                order_id, total, role, changed_by=performed_by, reason=reason,
            )
        except Exception as e:
            log.error(f"Receiving {order_number} failed after {len(applied)} line(s): {e}")
            compensated, uncompensated = await self._compensate(order_number, applied, performed_by)
            raise ReceivingError(
                RECEIVING_FAILED_MESSAGE,
                details={
                    "orderId": order_id,
                    "cause": getattr(e, "message", str(e)),
                    "applied": [line.line_id for line in applied] + stranded,
                    "compensated": compensated,
                    "uncompensated": uncompensated + stranded,
                },
            ) from e

        log.info(f"Received {order_number}: {len(applied)} line(s), verified total {total}")
        return {
            "order": updated,
            "session": session.to_dict(),
            "verifiedTotal": total,
            "receiptHtml": render_receipt(updated, session),
        }

    async def _compensate(self, order_number, applied: List[ReceivingLine], performed_by):
        compensated, uncompensated = [], []
        for line in reversed(applied):
            try:
                await self.inventory.update_batch_stock(
                    line.item_id,
                    {"batchNumber": line.batch_number},
                    -line.received_quantity,
                    {
                        "reason": REVERSAL_REASON,
                        "orderNumber": order_number,
                        "notes": f"Reversal of failed receipt from PO {order_number}",
                        "performedBy": performed_by,
                    },
                )
                compensated.append(line.line_id)
            except Exception as e:
                log.error(f"Could not reverse line {line.line_id} of {order_number}: {e}")
                uncompensated.append(line.line_id)
        if compensated:
            log.warning(f"Reversed {len(compensated)} line(s) of {order_number}")
        return compensated, uncompensated
