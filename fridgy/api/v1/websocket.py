import asyncio
import logging
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from typing import Optional

from fridgy.core.exception import CustomException
from fridgy.core.state import ListenerScope
from fridgy.database import get_db
from fridgy.dependencies import verify_token
from fridgy.services.fridge_service import FridgeService
from fridgy.services.inventory_stream import FridgeItemsStream

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/fridges/{fridge_id}/items")
async def stream_fridge_items(
    websocket: WebSocket,
    fridge_id: str,
    token: Optional[str] = Query(None, description="Firebase ID token"),
    db=Depends(get_db)
):
    """
    Live inventory for one fridge.

    Sends ``{"state": "loading"}`` first, then a ``success`` frame with the
    sorted items on every change, or an ``error`` frame if the listener fails.
    """
    try:
        current_user = verify_token(token, db)
        service = FridgeService(db)
        service.get_accessible_fridge(fridge_id, current_user.uid)
    except CustomException as ex:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=ex.detail)
        return

    await websocket.accept()

    loop = asyncio.get_running_loop()
    frames: asyncio.Queue = asyncio.Queue()
    scope = ListenerScope(f"ws:{fridge_id}:{current_user.uid}")
    stream = FridgeItemsStream(service, fridge_id)

    # Snapshot callbacks arrive on the SDK's threads.
    subscription = stream.state.subscribe(
        lambda state: asyncio.run_coroutine_threadsafe(frames.put(state.to_frame()), loop)
    )
    stream.launch_in(scope)

    async def send_frames():
        while True:
            await websocket.send_json(await frames.get())

    async def wait_for_close():
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(send_frames())
    receiver = asyncio.create_task(wait_for_close())
    try:
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            ex = task.exception()
            if ex is not None and not isinstance(ex, WebSocketDisconnect):
                logger.error("Item stream for fridge %s failed: %s", fridge_id, ex)
    finally:
        subscription.unsubscribe()
        scope.cancel_all()
        logger.debug("Closed item stream for fridge %s", fridge_id)
