from unittest.mock import patch

import pytest
import pytest_asyncio
from tortoise import Tortoise
from tortoise.exceptions import OperationalError

from hotel_inventory.core.db import init_db
from hotel_inventory.core.errors import StoreError
from hotel_inventory.models.document import Document
from hotel_inventory.scripts.seed_data import seed
from hotel_inventory.services.activity_service import ActivityLogService
from hotel_inventory.services.inventory_service import InventoryService
from hotel_inventory.store.tortoise_store import TortoiseDocumentStore


@pytest_asyncio.fixture
async def db_store():
    """Tortoise-backed store on a throwaway SQLite database."""
    await init_db("sqlite://:memory:")
    yield TortoiseDocumentStore()
    await Tortoise.close_connections()


class TestTortoiseDocumentStore:
    @pytest.mark.asyncio
    async def test_nested_document_roundtrip(self, db_store):
        doc = {
            "name": "Fresh Pasta",
            "currentStock": 8,
            "tags": ["kitchen", "italian"],
            "batches": {"B1": {"quantity": 5}, "B2": {"quantity": 3}},
        }
        await db_store.set("inventory/menu-005", doc)

        assert await db_store.get("inventory/menu-005") == doc
        assert await db_store.get("inventory/menu-005/batches/B2") == {"quantity": 3}

    @pytest.mark.asyncio
    async def test_get_children_of_collection(self, db_store):
        await db_store.set("menu/a", {"name": "A"})
        await db_store.set("menu/b", {"name": "B"})

        children = await db_store.get_children("menu")
        assert sorted((c["id"], c["name"]) for c in children) == [("a", "A"), ("b", "B")]

    @pytest.mark.asyncio
    async def test_set_replaces_previous_subtree(self, db_store):
        await db_store.set("inventory/x", {"name": "X", "batches": {"B1": {"quantity": 1}}})
        await db_store.set("inventory/x", {"name": "X2"})

        assert await db_store.get("inventory/x") == {"name": "X2"}

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, db_store):
        await db_store.set("budgets/2024-03", {"amount": 1000, "spent": 0, "notes": "q1"})
        await db_store.update("budgets/2024-03", {"spent": 250, "notes": None})

        assert await db_store.get("budgets/2024-03") == {"amount": 1000, "spent": 250}

    @pytest.mark.asyncio
    async def test_update_creates_missing_node(self, db_store):
        await db_store.update("budgets/2025-01", {"amount": 10})

        assert await db_store.get("budgets/2025-01") == {"amount": 10}
        assert [c["id"] for c in await db_store.get_children("budgets")] == ["2025-01"]

    @pytest.mark.asyncio
    async def test_update_with_dict_replaces_child(self, db_store):
        await db_store.set("inventory/x", {"name": "X", "meta": {"a": 1, "b": 2}})
        await db_store.update("inventory/x", {"meta": {"c": 3}})

        assert await db_store.get("inventory/x") == {"name": "X", "meta": {"c": 3}}

    @pytest.mark.asyncio
    async def test_remove_subtree(self, db_store):
        await db_store.set("inventory/x", {"name": "X", "batches": {"B1": {"quantity": 1}}})
        await db_store.remove("inventory/x")

        assert await db_store.get("inventory/x") is None
        assert await Document.filter(path__startswith="inventory/x").count() == 0

    @pytest.mark.asyncio
    async def test_underscore_keys_do_not_match_as_wildcards(self, db_store):
        await db_store.set("inventory/a_b", {"name": "underscore"})
        await db_store.set("inventory/aXb", {"name": "other"})
        await db_store.set("inventory/a_b2", {"name": "prefix"})

        assert await db_store.get("inventory/a_b") == {"name": "underscore"}

    @pytest.mark.asyncio
    async def test_orm_failure_becomes_store_error(self, db_store):
        with patch.object(Document, "filter", side_effect=OperationalError("database is locked")):
            with pytest.raises(StoreError) as exc_info:
                await db_store.get("inventory/x")

        assert "database is locked" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_write_notifies_subscribers(self, db_store):
        snapshots = []
        db_store.subscribe("inventory", snapshots.append)

        await db_store.set("inventory/x", {"name": "X"})

        assert snapshots == [[{"name": "X", "id": "x"}]]


class TestBatchStockOnDatabase:
    @pytest.mark.asyncio
    async def test_two_batches_sum_to_current_stock(self, db_store):
        inventory = InventoryService(db_store, ActivityLogService(db_store))
        await inventory.create({"id": "menu-005", "name": "Fresh Pasta", "category": "menu-items"})

        await inventory.update_batch_stock("menu-005", {"batchNumber": "B1"}, 5)
        result = await inventory.update_batch_stock("menu-005", {"batchNumber": "B2"}, 3)

        assert result["newStock"] == 8
        item = await inventory.get_by_id("menu-005")
        assert item["currentStock"] == 8
        assert sorted(b["quantity"] for b in await inventory.get_batches("menu-005")) == [3, 5]


class TestSeedScript:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_store):
        first = await seed(db_store)
        second = await seed(db_store)

        assert first == 23
        assert second == 0
        po = await db_store.get("purchaseOrders/po-001")
        assert po["orderNumber"] == "PO-2024-001"
        assert len(po["statusHistory"]) == 2
