import pytest

from hotel_inventory.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from hotel_inventory.core.policy import Role
from hotel_inventory.services.purchase_order_service import order_total

CONTROLLER = Role.INVENTORY_CONTROLLER
PURCHASING = Role.PURCHASING_OFFICER
KITCHEN = Role.KITCHEN_STAFF


def _order_data(**overrides):
    data = {
        "supplier": {"id": "supplier-001", "name": "Coffee Roasters Ltd", "email": "john@coffeeroasters.com"},
        "items": [
            {"itemId": "menu-001", "itemName": "Premium Coffee Beans", "unit": "kg", "quantity": 10, "unitCost": 5},
            {"inventoryItemId": "menu-006", "itemName": "Truffle Oil", "unit": "bottles", "quantity": 4, "unitCost": 20},
        ],
        "status": "delivered",
    }
    data.update(overrides)
    return data


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_new_order_is_pending_with_total(self, services):
        order = await services.purchase_orders.create(_order_data(), requested_by="po-1", user_role=PURCHASING.value)

        assert order["status"] == "pending"
        assert order["totalAmount"] == 130
        assert order["priority"] == "normal"
        assert order["requestedBy"] == "po-1"
        assert [h["status"] for h in order["statusHistory"]] == ["pending"]
        assert [line["itemId"] for line in order["items"]] == ["menu-001", "menu-006"]
        logs = await services.activity.get_by_entity("purchase-order", order["id"])
        assert [e["type"] for e in logs] == ["CREATE_PO"]

    @pytest.mark.asyncio
    async def test_order_number_continues_sequence(self, seeded_services):
        assert await seeded_services.purchase_orders.next_order_number(2024) == "PO-2024-005"
        assert await seeded_services.purchase_orders.next_order_number(2031) == "PO-2031-001"

    @pytest.mark.asyncio
    async def test_order_without_items_rejected(self, services):
        with pytest.raises(ValidationError):
            await services.purchase_orders.create(_order_data(items=[]))

    @pytest.mark.asyncio
    async def test_line_without_item_id_rejected(self, services):
        with pytest.raises(ValidationError):
            await services.purchase_orders.create(_order_data(items=[{"itemName": "Mystery", "quantity": 1}]))

    def test_order_total(self):
        assert order_total([{"quantity": 2, "unitCost": 2.5}, {"quantity": 3}]) == 5


class TestStatusTransitions:
    @pytest.mark.asyncio
    async def test_full_lifecycle_appends_one_entry_per_step(self, services):
        po = services.purchase_orders
        order = await po.create(_order_data(), requested_by="po-1")
        first_entry = order["statusHistory"][0]

        await po.transition(order["id"], "approved", CONTROLLER, changed_by="ic-1")
        await po.transition(order["id"], "in-transit", CONTROLLER, changed_by="ic-1")
        done = await po.transition(order["id"], "delivered", PURCHASING, changed_by="po-1", reason="All boxes in")

        history = done["statusHistory"]
        assert [h["status"] for h in history] == ["pending", "approved", "in-transit", "delivered"]
        assert history[0] == first_entry
        assert history[-1]["reason"] == "All boxes in"
        assert done["approvedBy"] == "ic-1"
        assert done["approvedAt"] and done["shippedAt"] and done["receivedAt"]

    @pytest.mark.asyncio
    async def test_reject_records_who(self, services):
        order = await services.purchase_orders.create(_order_data())

        rejected = await services.purchase_orders.transition(order["id"], "rejected", CONTROLLER, changed_by="ic-1")

        assert rejected["status"] == "rejected"
        assert rejected["rejectedBy"] == "ic-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [KITCHEN, PURCHASING, None, "guest"])
    async def test_only_controller_approves(self, services, role):
        order = await services.purchase_orders.create(_order_data())

        with pytest.raises(PermissionDeniedError):
            await services.purchase_orders.transition(order["id"], "approved", role)
        assert (await services.purchase_orders.get_by_id(order["id"]))["status"] == "pending"

    @pytest.mark.asyncio
    async def test_cannot_skip_steps(self, services):
        order = await services.purchase_orders.create(_order_data())

        with pytest.raises(InvalidTransitionError):
            await services.purchase_orders.transition(order["id"], "in-transit", CONTROLLER)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order_id, target", [("po-004", "approved"), ("po-004", "in-transit")])
    async def test_delivered_is_terminal(self, seeded_services, order_id, target):
        with pytest.raises(InvalidTransitionError):
            await seeded_services.purchase_orders.transition(order_id, target, CONTROLLER)

    @pytest.mark.asyncio
    async def test_rejected_is_terminal(self, services):
        po = services.purchase_orders
        order = await po.create(_order_data())
        await po.transition(order["id"], "rejected", CONTROLLER)

        with pytest.raises(InvalidTransitionError):
            await po.transition(order["id"], "approved", CONTROLLER)

    @pytest.mark.asyncio
    async def test_unknown_status(self, services):
        order = await services.purchase_orders.create(_order_data())

        with pytest.raises(InvalidTransitionError):
            await services.purchase_orders.transition(order["id"], "lost", CONTROLLER)

    @pytest.mark.asyncio
    async def test_missing_order(self, services):
        with pytest.raises(NotFoundError):
            await services.purchase_orders.transition("ghost", "approved", CONTROLLER)


class TestUpdateOrder:
    @pytest.mark.asyncio
    async def test_status_cannot_be_patched(self, services):
        order = await services.purchase_orders.create(_order_data())

        with pytest.raises(ValidationError):
            await services.purchase_orders.update(order["id"], {"status": "approved"})

    @pytest.mark.asyncio
    async def test_items_patch_recomputes_total(self, services):
        order = await services.purchase_orders.create(_order_data())

        updated = await services.purchase_orders.update(
            order["id"], {"items": [{"itemId": "menu-001", "quantity": 3, "unitCost": 10}]},
        )

        assert updated["totalAmount"] == 30
        assert updated["status"] == "pending"

    @pytest.mark.asyncio
    async def test_delivered_order_is_read_only(self, seeded_services):
        with pytest.raises(ValidationError):
            await seeded_services.purchase_orders.update("po-004", {"notes": "late"})


class TestOrderQueries:
    @pytest.mark.asyncio
    async def test_overdue_excludes_delivered(self, seeded_services):
        overdue = {o["id"] for o in await seeded_services.purchase_orders.get_overdue_orders()}

        assert overdue == {"po-001", "po-002", "po-003"}

    @pytest.mark.asyncio
    async def test_search_by_contact(self, seeded_services):
        found = await seeded_services.purchase_orders.search("maria")

        assert [o["id"] for o in found] == ["po-002"]

    @pytest.mark.asyncio
    async def test_status_and_priority_filters(self, seeded_services):
        po = seeded_services.purchase_orders

        assert [o["id"] for o in await po.get_pending_orders()] == ["po-002"]
        assert [o["id"] for o in await po.get_approved_orders()] == ["po-001"]
        assert [o["id"] for o in await po.get_by_priority("low")] == ["po-004"]
