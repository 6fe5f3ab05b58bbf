import logging
from typing import Any, Dict, List, Optional

from hotel_inventory.core.dates import utcnow_iso
from hotel_inventory.core.errors import NotFoundError
from hotel_inventory.store.base import DocumentStore, join_path

log = logging.getLogger(__name__)


def matches(query: str, *values) -> bool:
    """Case-insensitive substring match against any of ``values``."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in str(v).lower() for v in values if v is not None)


class CollectionService:
    """
    CRUD over one top-level store collection. Subclasses add the domain queries.

    Reads of a missing id return None; update and delete of a missing id raise
    NotFoundError. Store failures surface as StoreError from the store itself.
    """

    collection: str = ""
    label: str = "Document"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _path(self, doc_id: str, *rest: str) -> str:
        return join_path(self.collection, doc_id, *rest)

    async def get_all(self) -> List[Dict[str, Any]]:
        return await self.store.get_children(self.collection)

    async def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = await self.store.get(self._path(doc_id))
        if doc is None:
            return None
        return {**doc, "id": doc_id}

    async def require(self, doc_id: str) -> Dict[str, Any]:
        doc = await self.get_by_id(doc_id)
        if doc is None:
            raise NotFoundError(f"{self.label} {doc_id} not found", details={"id": doc_id})
        return doc

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        doc_id = data.pop("id", None)
        if doc_id:
            now = utcnow_iso()
            await self.store.set(self._path(doc_id), {**data, "createdAt": now, "updatedAt": now})
        else:
            doc_id = await self.store.push(self.collection, data)
        return await self.get_by_id(doc_id)

    async def update(self, doc_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        await self.require(doc_id)
        patch = {k: v for k, v in patch.items() if k != "id"}
        await self.store.update(self._path(doc_id), {**patch, "updatedAt": utcnow_iso()})
        return await self.get_by_id(doc_id)

    async def delete(self, doc_id: str) -> bool:
        await self.require(doc_id)
        await self.store.remove(self._path(doc_id))
        return True
