import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from hotel_inventory.main import create_app
from hotel_inventory.services.email_service import EmailClient

CONTROLLER = {"X-User-Role": "inventory-controller", "X-User-Id": "ic-001"}
PURCHASING = {"X-User-Role": "purchasing-officer", "X-User-Id": "po-001"}
KITCHEN = {"X-User-Role": "kitchen-staff", "X-User-Id": "ks-001"}


@pytest.fixture
def client(seeded_store):
    mailer = EmailClient(
        "http://mailer.test/send",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"success": True})),
    )
    with TestClient(create_app(store=seeded_store, email_client=mailer)) as client:
        yield client


class TestErrorEnvelope:
    def test_not_found(self, client):
        response = client.get("/api/v1/inventory/ghost", headers=KITCHEN)

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "not_found"
        assert "request_id" in body

    def test_missing_role_is_forbidden(self, client):
        response = client.get("/api/v1/inventory/")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "permission_denied"

    def test_request_validation(self, client):
        response = client.post("/api/v1/purchase-orders/", json={"supplier": {"name": "X"}, "items": []}, headers=PURCHASING)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"


class TestInventoryRoutes:
    def test_list_carries_stock_status(self, client):
        response = client.get("/api/v1/inventory/", params={"category": "toiletries"}, headers=KITCHEN)

        assert response.status_code == 200
        statuses = {i["id"]: i["stockStatus"] for i in response.json()["data"]}
        assert statuses == {"toiletry-001": "low", "toiletry-002": "normal"}

    def test_create_requires_controller(self, client):
        payload = {"name": "Hand Towels", "category": "toiletries", "restockThreshold": 20}

        denied = client.post("/api/v1/inventory/", json=payload, headers=KITCHEN)
        created = client.post("/api/v1/inventory/", json=payload, headers=CONTROLLER)

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json()["data"]["stockStatus"] == "critical"

    def test_batch_stock_movement(self, client):
        response = client.post(
            "/api/v1/inventory/menu-005/stock",
            json={"change": 3, "reason": "restock", "batchNumber": "LOT-9"},
            headers=KITCHEN,
        )

        assert response.status_code == 200
        assert response.json()["data"]["newStock"] == 8
        batches = client.get("/api/v1/inventory/menu-005/batches", headers=KITCHEN).json()["data"]
        assert sorted(b["id"] for b in batches) == ["LOT_9", "UNTRACKED"]

    def test_overdraw_is_rejected(self, client):
        response = client.post("/api/v1/inventory/menu-002/stock", json={"change": -1}, headers=KITCHEN)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"


class TestPurchaseOrderRoutes:
    def test_create_order_starts_pending(self, client):
        payload = {
            "supplier": {"id": "supplier-001", "name": "Coffee Roasters Ltd"},
            "items": [{"itemId": "menu-001", "itemName": "Premium Coffee Beans", "quantity": 5, "unitCost": 1275}],
            "priority": "urgent",
        }

        response = client.post("/api/v1/purchase-orders/", json=payload, headers=PURCHASING)

        assert response.status_code == 201
        order = response.json()["data"]
        assert order["status"] == "pending"
        assert order["priority"] == "urgent"
        assert order["orderNumber"].startswith("PO-")
        assert order["requestedBy"] == "po-001"

    def test_filter_by_status(self, client):
        response = client.get("/api/v1/purchase-orders/", params={"status": "in-transit"}, headers=KITCHEN)

        assert [o["id"] for o in response.json()["data"]] == ["po-003"]

    def test_approval_needs_controller(self, client):
        denied = client.post("/api/v1/purchase-orders/po-002/status", json={"status": "approved"}, headers=PURCHASING)
        approved = client.post("/api/v1/purchase-orders/po-002/status", json={"status": "approved"}, headers=CONTROLLER)

        assert denied.status_code == 403
        assert approved.status_code == 200
        assert approved.json()["data"]["approvedBy"] == "ic-001"

    def test_invalid_transition(self, client):
        response = client.post("/api/v1/purchase-orders/po-004/status", json={"status": "approved"}, headers=CONTROLLER)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_transition"

    def test_receiving_preview_and_receive(self, client):
        preview = client.get("/api/v1/purchase-orders/po-001/receiving-preview", headers=PURCHASING)
        assert preview.json()["data"]["verifiedTotal"] == 63750

        response = client.post(
            "/api/v1/purchase-orders/po-001/receive",
            json={"lines": [{"lineId": 0, "receivedQuantity": 48, "expirationDate": "2030-03-01T00:00:00Z"}]},
            headers=PURCHASING,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["order"]["status"] == "delivered"
        assert data["verifiedTotal"] == 48 * 1275
        assert data["session"]["lines"][0]["badge"] == "Short by 2"
        assert "INTERNAL RECEIVING NOTE" in data["receiptHtml"]

    def test_kitchen_cannot_receive(self, client):
        response = client.post("/api/v1/purchase-orders/po-001/receive", json={"lines": []}, headers=KITCHEN)

        assert response.status_code == 403

    def test_email_approved_order(self, client):
        response = client.post("/api/v1/purchase-orders/po-001/email", json={"message": "Thanks"}, headers=PURCHASING)

        assert response.status_code == 200
        assert response.json()["data"]["success"] is True


class TestOtherRoutes:
    def test_menu_refresh_and_alerts(self, client):
        refreshed = client.post("/api/v1/menu/refresh-availability", headers=KITCHEN)
        alerts = client.get("/api/v1/menu/alerts", headers=KITCHEN)

        assert refreshed.status_code == 200
        assert set(alerts.json()["data"]) == {"out-of-stock", "low-stock", "expired"}
        assert "menu-002" in [e["menuItemId"] for e in alerts.json()["data"]["out-of-stock"]]

    def test_supplier_approval(self, client):
        denied = client.post("/api/v1/suppliers/supplier-004/approve", headers=PURCHASING)
        approved = client.post("/api/v1/suppliers/supplier-004/approve", headers=CONTROLLER)

        assert denied.status_code == 403
        assert approved.json()["data"]["isApproved"] is True

    def test_budget_upsert_and_figures(self, client):
        client.put("/api/v1/budgets/2024/3", json={"amount": 1000, "notes": "March"}, headers=CONTROLLER)
        response = client.get("/api/v1/budgets/2024/3", headers=PURCHASING)

        budget = response.json()["data"]
        assert budget["amount"] == 1000
        assert budget["remaining"] == 1000
        assert budget["percentageUsed"] == 0

    def test_budget_rejects_non_numeric_amount(self, client):
        response = client.put("/api/v1/budgets/2024/3", json={"amount": "lots"}, headers=CONTROLLER)

        assert response.status_code == 400

    def test_missing_budget_month_is_placeholder(self, client):
        response = client.get("/api/v1/budgets/2024/7", headers=PURCHASING)

        assert response.json()["data"]["amount"] == 0
        assert response.json()["data"]["percentageUsed"] == 0

    def test_activity_log_is_controller_only(self, client):
        client.patch("/api/v1/inventory/menu-001", json={"isActive": False}, headers=CONTROLLER)

        denied = client.get("/api/v1/activity/", headers=KITCHEN)
        entries = client.get("/api/v1/activity/", params={"entity_type": "inventory"}, headers=CONTROLLER)

        assert denied.status_code == 403
        assert entries.json()["data"][0]["details"] == "Item deactivated"


class TestLiveUpdates:
    def test_initial_snapshot(self, client):
        with client.websocket_connect("/ws/purchaseOrders?role=kitchen-staff") as ws:
            snapshot = ws.receive_json()

        assert sorted(o["id"] for o in snapshot) == ["po-001", "po-002", "po-003", "po-004"]

    def test_unauthorised_subscription_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/activityLogs?role=kitchen-staff") as ws:
                ws.receive_json()

        assert exc_info.value.code == 1008
