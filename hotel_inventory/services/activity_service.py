import logging
from typing import Any, Dict, List, Optional

from hotel_inventory.core.dates import utcnow_iso
from hotel_inventory.store.base import DocumentStore

log = logging.getLogger(__name__)

ACTIVITY_COLLECTION = "activityLogs"


class ActivityLogService:
    """Append-only audit trail: entries are never updated or deleted."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def log(
        self,
        type: str,
        entity_type: str,
        entity_id: Optional[str],
        entity_name: Optional[str] = None,
        details: str = "",
        user_role: Optional[str] = None,
    ) -> Optional[str]:
        """
        Appends one entry. Fire-and-forget: a failure is logged and swallowed so the
        mutation that triggered it still stands. Returns the entry id, or None.
        """
        entry = {
            "type": type,
            "entityType": entity_type,
            "entityId": entity_id,
            "entityName": entity_name,
            "details": details,
            "userRole": getattr(user_role, "value", user_role),
            "timestamp": utcnow_iso(),
        }
        try:
            return await self.store.push(ACTIVITY_COLLECTION, entry)
        except Exception as e:
            log.error(f"Error logging activity {type} for {entity_type} {entity_id}: {e}")
            return None

    async def get_all(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        entries = await self.store.get_children(ACTIVITY_COLLECTION)
        entries.sort(key=lambda e: (e.get("timestamp") or "", e.get("id") or ""), reverse=True)
        return entries[:limit] if limit else entries

    async def get_by_entity(self, entity_type: str, entity_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            e for e in await self.get_all()
            if e.get("entityType") == entity_type
            and (entity_id is None or e.get("entityId") == entity_id)
        ]
