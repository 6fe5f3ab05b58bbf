import logging
import re
import time
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from hotel_inventory.core.config import DEFAULT_EXPIRY_WINDOW_DAYS
from hotel_inventory.core.dates import parse_datetime, utcnow, utcnow_iso
from hotel_inventory.core.errors import StockRollbackError, ValidationError
from hotel_inventory.services.activity_service import ActivityLogService
from hotel_inventory.services.base import CollectionService, matches
from hotel_inventory.store.base import DocumentStore

log = logging.getLogger(__name__)

TRANSACTIONS_COLLECTION = "transactions"
# Holds stock that existed before an item's first batch was recorded
UNTRACKED_BATCH = "UNTRACKED"


def batch_id_for(batch_number: Optional[str]) -> str:
    if batch_number:
        return re.sub(r"[^a-zA-Z0-9]", "_", batch_number)
    return f"batch_{int(time.time() * 1000)}"


def stock_status(item: Dict[str, Any]) -> str:
    current = item.get("currentStock") or 0
    threshold = item.get("restockThreshold") or 0
    max_stock = item.get("maxStock")
    if current <= 0:
        return "critical"
    if current <= threshold:
        return "low"
    if max_stock and current > max_stock:
        return "excess"
    return "normal"


def _fefo_order(batch: Dict[str, Any]):
    expiry = parse_datetime(batch.get("expirationDate"))
    # No expiry sorts last
    return (expiry is None, expiry.timestamp() if expiry else 0, batch.get("id") or "")


class InventoryService(CollectionService):
    collection = "inventory"
    label = "Inventory item"

    def __init__(self, store: DocumentStore, activity: ActivityLogService):
        super().__init__(store)
        self.activity = activity

    # ----------- CRUD with audit trail -----------

    async def create(self, data: Dict[str, Any], user_role: Optional[str] = None) -> Dict[str, Any]:
        doc = {"isActive": True, "currentStock": 0, **data}
        doc.pop("batches", None)
        item = await super().create(doc)
        await self.activity.log(
            "CREATE_ITEM", "inventory", item["id"], item.get("name"),
            "Manual item creation", user_role,
        )
        return item

    async def update(self, item_id: str, patch: Dict[str, Any], user_role: Optional[str] = None) -> Dict[str, Any]:
        current = await self.require(item_id)
        patch = dict(patch)
        patch.pop("batches", None)
        if "currentStock" in patch and current.get("batches"):
            raise ValidationError(
                "Stock of a batch-tracked item can only change through stock movements",
                details={"id": item_id},
            )
        item = await super().update(item_id, patch)
        if "isActive" in patch:
            details = "Item activated" if patch["isActive"] else "Item deactivated"
        else:
            details = "Manual item update"
        await self.activity.log(
            "UPDATE_ITEM", "inventory", item_id, current.get("name") or "Unknown Item",
            details, user_role,
        )
        return item

    async def delete(self, item_id: str, user_role: Optional[str] = None) -> bool:
        current = await self.require(item_id)
        await super().delete(item_id)
        await self.activity.log(
            "DELETE_ITEM", "inventory", item_id, current.get("name"),
            "Manual item deletion", user_role,
        )
        return True

    # ----------- Queries -----------

    async def get_by_category(self, category: str) -> List[Dict[str, Any]]:
        return [i for i in await self.get_all() if i.get("category") == category]

    async def get_low_stock_items(self) -> List[Dict[str, Any]]:
        return [
            i for i in await self.get_all()
            if (i.get("currentStock") or 0) <= (i.get("restockThreshold") or 0)
        ]

    async def get_critical_stock_items(self) -> List[Dict[str, Any]]:
        return [i for i in await self.get_all() if (i.get("currentStock") or 0) == 0]

    async def get_expiring_items(self, days: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> List[Dict[str, Any]]:
        now = utcnow()
        until = now + timedelta(days=days)
        out = []
        for item in await self.get_all():
            expiry = parse_datetime(item.get("expirationDate"))
            if expiry is not None and now <= expiry <= until:
                out.append(item)
        return out

    async def get_expired_items(self) -> List[Dict[str, Any]]:
        now = utcnow()
        out = []
        for item in await self.get_all():
            expiry = parse_datetime(item.get("expirationDate"))
            if expiry is not None and expiry < now:
                out.append(item)
        return out

    async def search(self, query: str) -> List[Dict[str, Any]]:
        return [
            i for i in await self.get_all()
            if matches(query, i.get("name"), i.get("description"), i.get("category"), i.get("location"))
        ]

    async def get_items_by_supplier(self, supplier_name: str) -> List[Dict[str, Any]]:
        """Items whose supplier field holds the supplier's name or any matching supplier id."""
        if not supplier_name:
            return []
        wanted = supplier_name.strip().lower()
        keys = {wanted}
        for s in await self.store.get_children("suppliers"):
            name = (s.get("name") or "").strip().lower()
            if wanted in (name, s["id"].lower()):
                keys.update({name, s["id"].lower()})
        keys.discard("")
        return [
            i for i in await self.get_all()
            if (i.get("supplier") or "").strip().lower() in keys
        ]

    async def get_batches(self, item_id: str) -> List[Dict[str, Any]]:
        return await self.store.get_children(self._path(item_id, "batches"))

    async def get_transactions(self, item_id: Optional[str] = None) -> List[Dict[str, Any]]:
        txns = await self.store.get_children(TRANSACTIONS_COLLECTION)
        if item_id is not None:
            txns = [t for t in txns if t.get("itemId") == item_id]
        txns.sort(key=lambda t: (t.get("timestamp") or "", t.get("id") or ""), reverse=True)
        return txns

    # ----------- Stock movements -----------

    async def recompute_stock(self, item_id: str) -> float:
        """Sets currentStock to the sum of the item's batch quantities and returns it."""
        total = sum((b.get("quantity") or 0) for b in await self.get_batches(item_id))
        await self.store.update(self._path(item_id), {"currentStock": total, "updatedAt": utcnow_iso()})
        return total

    async def _record_transaction(
        self,
        item: Dict[str, Any],
        change: float,
        previous_stock: float,
        new_stock: float,
        transaction: Optional[Dict[str, Any]],
        batch_number: Optional[str] = None,
    ) -> str:
        record = {
            "itemId": item["id"],
            "itemName": item.get("name"),
            "type": "stock-in" if change > 0 else "stock-out",
            "quantity": abs(change),
            "previousStock": previous_stock,
            "newStock": new_stock,
            "reason": "adjustment",
            "notes": "",
            "performedBy": None,
        }
        if batch_number:
            record["batchNumber"] = batch_number
        record.update({k: v for k, v in (transaction or {}).items() if v is not None})
        record["timestamp"] = utcnow_iso()
        return await self.store.push(TRANSACTIONS_COLLECTION, record)

    async def update_batch_stock(
        self,
        item_id: str,
        batch: Optional[Dict[str, Any]],
        change: float,
        transaction: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Applies ``change`` to one batch and recomputes the aggregate.

        The batch is located by its sanitised batch number, or created. An item that
        still holds un-batched stock gets that stock moved into the UNTRACKED batch
        first, so the aggregate keeps equalling the batch sum. A batch that already
        exists keeps its expiration date.

        Nothing is written when the movement is rejected. If a write fails after the
        batch has landed, the batches and the aggregate are put back before the error
        propagates; when that also fails ``StockRollbackError`` is raised.
        """
        item = await self.require(item_id)
        batch = dict(batch or {})
        batch_number = batch.get("batchNumber")
        batch_id = batch_id_for(batch_number)
        original_batches = item.get("batches") or {}
        batches = dict(original_batches)
        previous_stock = item.get("currentStock") or 0
        now = utcnow_iso()

        # --- 1. Start batch tracking without losing existing stock ---
        untracked = None
        if not batches and previous_stock:
            untracked = {
                "batchNumber": UNTRACKED_BATCH,
                "quantity": previous_stock,
                "expirationDate": item.get("expirationDate"),
                "updatedAt": now,
            }
            batches[UNTRACKED_BATCH] = untracked

        # --- 2. Locate or initialise the batch, and validate ---
        existing = batches.get(batch_id) or {
            "quantity": 0,
            "batchNumber": batch_number or batch_id,
            "expirationDate": None,
        }
        new_quantity = (existing.get("quantity") or 0) + change
        if new_quantity < 0:
            raise ValidationError(
                f"Batch {existing.get('batchNumber')} holds {existing.get('quantity') or 0}, cannot remove {abs(change)}",
                details={"itemId": item_id, "batchId": batch_id},
            )

        # --- 3. Batch, aggregate, movement record ---
        written: List[str] = []
        try:
            if untracked is not None and batch_id != UNTRACKED_BATCH:
                await self.store.set(self._path(item_id, "batches", UNTRACKED_BATCH), untracked)
                written.append(UNTRACKED_BATCH)
            await self.store.set(self._path(item_id, "batches", batch_id), {
                **existing,
                "quantity": new_quantity,
                "expirationDate": existing.get("expirationDate") or batch.get("expirationDate"),
                "updatedAt": now,
            })
            written.append(batch_id)
            new_stock = await self.recompute_stock(item_id)
            await self._record_transaction(
                item, change, previous_stock, new_stock, transaction,
                batch_number=existing.get("batchNumber"),
            )
        except Exception as e:
            if written:
                await self._restore_batches(item_id, original_batches, written, previous_stock, e)
            raise
        return {"itemId": item_id, "batchId": batch_id, "newStock": new_stock}

    async def _restore_batches(
        self,
        item_id: str,
        original_batches: Dict[str, Any],
        written: List[str],
        previous_stock: float,
        cause: Exception,
    ) -> None:
        try:
            for batch_id in reversed(written):
                path = self._path(item_id, "batches", batch_id)
                if batch_id in original_batches:
                    await self.store.set(path, original_batches[batch_id])
                else:
                    await self.store.remove(path)
            await self.store.update(self._path(item_id), {"currentStock": previous_stock, "updatedAt": utcnow_iso()})
        except Exception as e:
            log.error(f"Could not restore batches of {item_id} after failed movement: {e}")
            raise StockRollbackError(
                f"Stock movement on {item_id} failed and could not be undone",
                details={"itemId": item_id, "batches": written, "cause": getattr(cause, "message", str(cause))},
            ) from e
        log.warning(f"Undid batch movement on {item_id} after failure: {cause}")

    def _allocate_fefo(self, item_id: str, batches: List[Dict[str, Any]], quantity: float) -> List[Tuple[Dict[str, Any], float]]:
        allocations = []
        remaining = quantity
        for b in sorted(batches, key=_fefo_order):
            if remaining <= 0:
                break
            take = min(b.get("quantity") or 0, remaining)
            if take <= 0:
                continue
            allocations.append((b, take))
            remaining -= take
        if remaining > 0:
            raise ValidationError(
                f"Batch stock insufficient for item {item_id}",
                details={"itemId": item_id, "shortBy": remaining},
            )
        return allocations

    async def update_stock(
        self,
        item_id: str,
        change: float,
        transaction: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Signed stock movement without a named batch.

        Un-batched items change their aggregate directly. For batch-tracked items a
        stock-out is drawn from batches earliest-expiry first, and a stock-in lands in
        the UNTRACKED batch.
        """
        item = await self.require(item_id)
        previous_stock = item.get("currentStock") or 0
        batches = await self.get_batches(item_id)

        if not batches:
            new_stock = previous_stock + change
            if new_stock < 0:
                raise ValidationError(
                    f"Insufficient stock for item {item_id}: {previous_stock} available",
                    details={"itemId": item_id},
                )
            await self.store.update(self._path(item_id), {"currentStock": new_stock, "updatedAt": utcnow_iso()})
            await self._record_transaction(item, change, previous_stock, new_stock, transaction)
            return {"itemId": item_id, "newStock": new_stock}

        if change >= 0:
            return await self.update_batch_stock(
                item_id, {"batchNumber": UNTRACKED_BATCH}, change, transaction,
            )

        allocations = self._allocate_fefo(item_id, batches, -change)
        now = utcnow_iso()
        for b, take in allocations:
            await self.store.update(
                self._path(item_id, "batches", b["id"]),
                {"quantity": (b.get("quantity") or 0) - take, "updatedAt": now},
            )
        new_stock = await self.recompute_stock(item_id)
        await self._record_transaction(
            item, change, previous_stock, new_stock, transaction,
            batch_number=", ".join(b.get("batchNumber") or b["id"] for b, _ in allocations),
        )
        return {
            "itemId": item_id,
            "newStock": new_stock,
            "allocations": [{"batchId": b["id"], "quantity": take} for b, take in allocations],
        }
