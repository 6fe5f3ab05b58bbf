"""Outbound purchase-order email.

The service does not send mail itself; it posts the order to an email endpoint
(``EMAIL_ENDPOINT_URL``) which renders and delivers the message.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from hotel_inventory.core.config import EMAIL_ENDPOINT_URL, EMAIL_TIMEOUT
from hotel_inventory.core.errors import EmailDeliveryError, ValidationError
from hotel_inventory.core.policy import Action, Resource, authorize
from hotel_inventory.services.activity_service import ActivityLogService
from hotel_inventory.services.purchase_order_service import APPROVED, PurchaseOrderService
from hotel_inventory.services.supplier_service import SupplierService

log = logging.getLogger(__name__)


class EmailClient:
    def __init__(
        self,
        endpoint_url: str = EMAIL_ENDPOINT_URL,
        timeout: float = EMAIL_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint_url = endpoint_url
        self._timeout = timeout
        self._transport = transport

    async def send_purchase_order_email(
        self,
        order: Dict[str, Any],
        supplier: Dict[str, Any],
        custom_subject: Optional[str] = None,
        custom_content: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Any non-2xx reply raises EmailDeliveryError carrying the server's own message."""
        body = {
            "orderData": {
                "order": order,
                "supplier": supplier,
                "customSubject": custom_subject,
                "customContent": custom_content,
            },
            "customMessage": message or "",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._endpoint_url, json=body)
        except httpx.HTTPError as e:
            log.error(f"Email endpoint unreachable for {order.get('orderNumber')}: {e}")
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"result": data}

        if not resp.is_success:
            error = data.get("error") or data.get("message") or "Failed to send email"
            log.error(f"Email send failed for {order.get('orderNumber')}: {resp.status_code} {error}")
            raise EmailDeliveryError(error, details={"status": resp.status_code})

        log.info(f"Purchase order {order.get('orderNumber')} emailed to {supplier.get('email')}")
        return data


class EmailService:
    """Checks an order may be emailed, then hands it to the EmailClient."""

    def __init__(
        self,
        client: EmailClient,
        purchase_orders: PurchaseOrderService,
        suppliers: SupplierService,
        activity: ActivityLogService,
    ):
        self.client = client
        self.purchase_orders = purchase_orders
        self.suppliers = suppliers
        self.activity = activity

    async def send_purchase_order(
        self,
        order_id: str,
        role,
        custom_subject: Optional[str] = None,
        custom_content: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        authorize(role, Action.EMAIL, Resource.PURCHASE_ORDER)
        order = await self.purchase_orders.require(order_id)
        if order.get("status") != APPROVED:
            raise ValidationError(
                f"Only approved orders can be emailed; {order.get('orderNumber')} is {order.get('status')}",
            )

        # Prefer the live supplier record over the snapshot taken at order time
        supplier = dict(order.get("supplier") or {})
        if supplier.get("id"):
            record = await self.suppliers.get_by_id(supplier["id"])
            if record:
                supplier = {**supplier, **record}
        if not supplier.get("email"):
            raise ValidationError(f"Supplier {supplier.get('name') or supplier.get('id')} has no email address")

        result = await self.client.send_purchase_order_email(
            order, supplier, custom_subject, custom_content, message,
        )
        await self.activity.log(
            "EMAIL_PO", "purchase-order", order_id, order.get("orderNumber"),
            f"PO emailed to {supplier['email']}", role,
        )
        return result
