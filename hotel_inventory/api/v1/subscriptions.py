import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from hotel_inventory.core.policy import Action, Resource, is_allowed
from hotel_inventory.events.change_feed import LatestSnapshotQueue

router = APIRouter()
log = logging.getLogger("uvicorn")

# Collections clients may watch, and the resource whose read permission guards each
SUBSCRIBABLE = {
    "inventory": Resource.INVENTORY,
    "purchaseOrders": Resource.PURCHASE_ORDER,
    "menu": Resource.MENU,
    "activityLogs": Resource.ACTIVITY,
}


async def _pump(websocket: WebSocket, queue: LatestSnapshotQueue):
    while True:
        snapshot = await queue.get()
        await websocket.send_json(snapshot)


async def _stop_sender(sender: asyncio.Task, collection: str):
    sender.cancel()
    try:
        await sender
    except asyncio.CancelledError:
        pass
    except Exception as e:
        log.warning(f"Sending to {collection} subscriber failed: {e}")


@router.websocket("/ws/{collection}")
async def watch_collection(websocket: WebSocket, collection: str):
    """
    Sends the full collection on connect and again after every change to it.
    A client that falls behind only ever gets the newest snapshot.
    """
    resource = SUBSCRIBABLE.get(collection)
    role = websocket.headers.get("x-user-role") or websocket.query_params.get("role")
    if resource is None or not is_allowed(role, Action.READ, resource):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    store = websocket.app.state.services.store
    await websocket.accept()
    queue = LatestSnapshotQueue()
    unsubscribe = store.subscribe(collection, queue.put)
    sender = None
    try:
        queue.put(await store.get_children(collection))
        sender = asyncio.create_task(_pump(websocket, queue))
        # Incoming messages are ignored; receiving only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        log.info(f"Subscriber to {collection} disconnected.")
    finally:
        unsubscribe()
        if sender is not None:
            await _stop_sender(sender, collection)
