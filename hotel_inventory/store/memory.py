import copy
from typing import Any, Dict, Optional

from hotel_inventory.events.change_feed import ChangeFeed
from hotel_inventory.store.base import DocumentStore, normalize_path


class MemoryDocumentStore(DocumentStore):
    """
    Nested-dict store used when no database is configured, and in tests.
    Not durable: everything is lost when the process exits.
    """

    name = "memory"

    def __init__(self, seed: Optional[Dict[str, Any]] = None, feed: Optional[ChangeFeed] = None):
        super().__init__(feed)
        self._root: Dict[str, Any] = copy.deepcopy(seed) if seed else {}

    def _walk(self, segments, create=False):
        node = self._root
        for s in segments:
            child = node.get(s)
            if not isinstance(child, dict):
                if not create:
                    return None
                child = {}
                node[s] = child
            node = child
        return node

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        node = self._walk(normalize_path(path).split("/"))
        if not node:
            return None
        return copy.deepcopy(node)

    async def set(self, path: str, value: Dict[str, Any]) -> None:
        *parents, leaf = normalize_path(path).split("/")
        parent = self._walk(parents, create=True)
        parent[leaf] = copy.deepcopy(value)
        await self._notify(path)

    async def update(self, path: str, patch: Dict[str, Any]) -> None:
        node = self._walk(normalize_path(path).split("/"), create=True)
        for key, value in patch.items():
            if value is None:
                node.pop(key, None)
            else:
                node[key] = copy.deepcopy(value)
        await self._notify(path)

    async def remove(self, path: str) -> None:
        *parents, leaf = normalize_path(path).split("/")
        parent = self._walk(parents)
        if parent is not None and leaf in parent:
            del parent[leaf]
            await self._notify(path)
