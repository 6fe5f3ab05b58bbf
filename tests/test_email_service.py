import json

import httpx
import pytest

from hotel_inventory.core.errors import EmailDeliveryError, PermissionDeniedError, ValidationError
from hotel_inventory.core.policy import Role
from hotel_inventory.services.email_service import EmailClient, EmailService

ENDPOINT = "http://mailer.test/api/send-email"


def _client(handler):
    return EmailClient(ENDPOINT, timeout=5, transport=httpx.MockTransport(handler))


def _service(services, client):
    return EmailService(client, services.purchase_orders, services.suppliers, services.activity)


class TestEmailClient:
    @pytest.mark.asyncio
    async def test_posts_order_and_supplier(self):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "messageId": "m-1"})

        result = await _client(handler).send_purchase_order_email(
            {"orderNumber": "PO-2024-001"}, {"email": "john@coffeeroasters.com"},
            custom_subject="Order", message="Please confirm",
        )

        assert result["messageId"] == "m-1"
        assert sent[0]["orderData"]["order"] == {"orderNumber": "PO-2024-001"}
        assert sent[0]["orderData"]["customSubject"] == "Order"
        assert sent[0]["customMessage"] == "Please confirm"

    @pytest.mark.asyncio
    async def test_server_error_message_is_surfaced(self):
        def handler(request):
            return httpx.Response(500, json={"error": "SMTP relay refused"})

        with pytest.raises(EmailDeliveryError) as exc_info:
            await _client(handler).send_purchase_order_email({}, {"email": "a@b.c"})

        assert exc_info.value.message == "SMTP relay refused"
        assert exc_info.value.details == {"status": 500}

    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EmailDeliveryError):
            await _client(handler).send_purchase_order_email({}, {"email": "a@b.c"})


class TestEmailService:
    @pytest.mark.asyncio
    async def test_sends_approved_order_to_live_supplier_email(self, seeded_services):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True})

        await seeded_services.suppliers.update("supplier-001", {"email": "orders@coffeeroasters.com"})
        email = _service(seeded_services, _client(handler))

        await email.send_purchase_order("po-001", Role.PURCHASING_OFFICER)

        assert sent[0]["orderData"]["supplier"]["email"] == "orders@coffeeroasters.com"
        logs = await seeded_services.activity.get_by_entity("purchase-order", "po-001")
        assert [e["type"] for e in logs] == ["EMAIL_PO"]

    @pytest.mark.asyncio
    async def test_pending_order_not_emailed(self, seeded_services):
        email = _service(seeded_services, _client(lambda r: httpx.Response(200, json={})))

        with pytest.raises(ValidationError):
            await email.send_purchase_order("po-002", Role.INVENTORY_CONTROLLER)

    @pytest.mark.asyncio
    async def test_kitchen_staff_cannot_email(self, seeded_services):
        email = _service(seeded_services, _client(lambda r: httpx.Response(200, json={})))

        with pytest.raises(PermissionDeniedError):
            await email.send_purchase_order("po-001", Role.KITCHEN_STAFF)
