import logging
from typing import Any, Dict, List, Optional

from hotel_inventory.core.dates import utcnow_iso
from hotel_inventory.core.errors import ValidationError
from hotel_inventory.services.base import CollectionService, matches

log = logging.getLogger(__name__)

HIGH_PERFORMANCE_RATING = 4.5
LOW_PERFORMANCE_RATING = 4.0


def _empty_metrics() -> Dict[str, Any]:
    return {
        "overallRating": 0,
        "deliveryReliability": 0,
        "qualityRating": 0,
        "responseTime": 0,
        "totalOrders": 0,
        "onTimeDeliveries": 0,
        "qualityIssues": 0,
        "lastEvaluationDate": None,
    }


def _rating(supplier: Dict[str, Any]) -> float:
    return (supplier.get("performanceMetrics") or {}).get("overallRating") or 0


def supplier_status(supplier: Dict[str, Any]) -> str:
    if not supplier.get("isApproved"):
        return "pending"
    return "active" if supplier.get("isActive") else "inactive"


class SupplierService(CollectionService):
    collection = "suppliers"
    label = "Supplier"

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """New suppliers start inactive and unapproved, with zeroed metrics."""
        doc = {
            **data,
            "isActive": False,
            "isApproved": False,
            "performanceMetrics": {**_empty_metrics(), **(data.get("performanceMetrics") or {})},
        }
        return await super().create(doc)

    async def approve_supplier(self, supplier_id: str, approved_by: Optional[str]) -> Dict[str, Any]:
        return await self.update(supplier_id, {
            "isApproved": True,
            "isActive": True,
            "approvedBy": approved_by,
            "approvedAt": utcnow_iso(),
        })

    async def get_by_status(self, status: str) -> List[Dict[str, Any]]:
        if status not in ("active", "pending", "inactive"):
            raise ValidationError(f"Unknown supplier status '{status}'")
        return [s for s in await self.get_all() if supplier_status(s) == status]

    async def get_active_suppliers(self) -> List[Dict[str, Any]]:
        return await self.get_by_status("active")

    async def get_pending_suppliers(self) -> List[Dict[str, Any]]:
        return await self.get_by_status("pending")

    async def get_high_performing_suppliers(self) -> List[Dict[str, Any]]:
        return [s for s in await self.get_all() if _rating(s) >= HIGH_PERFORMANCE_RATING]

    async def get_low_performing_suppliers(self) -> List[Dict[str, Any]]:
        # A zero rating means never evaluated, not poor performance
        return [s for s in await self.get_all() if 0 < _rating(s) < LOW_PERFORMANCE_RATING]

    async def search(self, query: str) -> List[Dict[str, Any]]:
        return [
            s for s in await self.get_all()
            if matches(query, s.get("name"), s.get("contactPerson"), s.get("email"),
                       *(s.get("categories") or []))
        ]

    async def get_linked_items(self, supplier_id: str) -> List[Dict[str, Any]]:
        """Inventory items whose supplier field holds this supplier's name or id."""
        supplier = await self.require(supplier_id)
        keys = {supplier_id.lower(), (supplier.get("name") or "").strip().lower()}
        keys.discard("")
        items = await self.store.get_children("inventory")
        return [i for i in items if (i.get("supplier") or "").strip().lower() in keys]
