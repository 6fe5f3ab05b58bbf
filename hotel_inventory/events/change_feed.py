import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Union

log = logging.getLogger(__name__)

Snapshot = List[Dict[str, Any]]
Subscriber = Callable[[Snapshot], Union[None, Awaitable[None]]]


class ChangeFeed:
    """
    In-process fan-out of collection snapshots.

    Every write under a collection publishes the *full* collection to each subscriber
    of that collection. There is no diffing and no ordering guarantee between
    collections; a slow subscriber simply sees fewer, newer snapshots.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        self._subscribers[collection].append(callback)

        def unsubscribe():
            callbacks = self._subscribers.get(collection, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def has_subscribers(self, collection: str) -> bool:
        return bool(self._subscribers.get(collection))

    async def publish(self, collection: str, snapshot: Snapshot) -> None:
        for callback in list(self._subscribers.get(collection, [])):
            try:
                result = callback(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # A broken subscriber must not fail the write that triggered it.
                log.error(f"Subscriber for '{collection}' failed: {e}")


class LatestSnapshotQueue:
    """Single-slot queue: putting a new snapshot discards any unsent one."""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)

    def put(self, snapshot: Snapshot) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(snapshot)

    async def get(self) -> Snapshot:
        return await self._queue.get()
