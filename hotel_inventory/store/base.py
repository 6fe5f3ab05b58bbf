"""Document store gateway.

A hierarchical key/value store addressed by slash-separated paths, e.g.
``inventory/{id}``, ``inventory/{id}/batches/{batchId}``, ``budgets/2024-03``.
Nested dicts are child nodes; every other value (lists included) is a leaf field.
"""
import re
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from hotel_inventory.core.dates import utcnow_iso
from hotel_inventory.core.errors import StoreError
from hotel_inventory.events.change_feed import ChangeFeed, Subscriber

_FORBIDDEN = re.compile(r"[.#$\[\]]")


def new_key() -> str:
    """Chronologically sortable push key."""
    return f"{int(time.time() * 1000):013d}-{uuid.uuid4().hex[:10]}"


def normalize_path(path: str) -> str:
    segments = [s for s in str(path).strip("/").split("/") if s]
    if not segments:
        raise StoreError("Store path must not be empty")
    for s in segments:
        if _FORBIDDEN.search(s):
            raise StoreError(f"Invalid character in store path segment '{s}'")
    return "/".join(segments)


def join_path(*parts: str) -> str:
    return normalize_path("/".join(str(p) for p in parts))


class DocumentStore(ABC):
    """Interface shared by the remote (Tortoise) and in-memory stores."""

    name = "abstract"

    def __init__(self, feed: Optional[ChangeFeed] = None):
        self.feed = feed or ChangeFeed()

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Whole subtree at ``path`` as a nested dict, or None when absent."""

    @abstractmethod
    async def set(self, path: str, value: Dict[str, Any]) -> None:
        """Replace the subtree at ``path``."""

    @abstractmethod
    async def update(self, path: str, patch: Dict[str, Any]) -> None:
        """Shallow-merge ``patch`` into the node at ``path``; None values delete fields."""

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete the subtree at ``path``; absent paths are a no-op."""

    async def get_children(self, path: str) -> List[Dict[str, Any]]:
        """Children of ``path`` as a list, each carrying its key as ``id``."""
        node = await self.get(path)
        if not isinstance(node, dict):
            return []
        return [
            {**child, "id": key}
            for key, child in node.items()
            if isinstance(child, dict)
        ]

    async def push(self, path: str, value: Dict[str, Any]) -> str:
        key = new_key()
        now = utcnow_iso()
        await self.set(join_path(path, key), {**value, "id": key, "createdAt": now, "updatedAt": now})
        return key

    def subscribe(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        return self.feed.subscribe(normalize_path(collection), callback)

    async def close(self) -> None:
        return None

    async def _notify(self, path: str) -> None:
        collection = normalize_path(path).split("/", 1)[0]
        if self.feed.has_subscribers(collection):
            snapshot = await self.get_children(collection)
            await self.feed.publish(collection, snapshot)
