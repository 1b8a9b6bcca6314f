import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from joyeria.services.change_feed import change_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["changes"])


def _split(value: str | None) -> set[str]:
    if not value:
        return set()
    return {item.strip() for item in value.split(",") if item.strip()}


async def _wait_for_disconnect(websocket: WebSocket):
    # Clients only listen; anything they send is ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/changes")
async def changes(websocket: WebSocket, tables: str | None = None, events: str | None = None):
    """Stream change events of the requested tables as JSON messages."""
    await websocket.accept()
    async with change_feed.subscribe(_split(tables), _split(events)) as subscription:
        receiver = asyncio.create_task(_wait_for_disconnect(websocket))
        getter = None
        try:
            while True:
                getter = asyncio.create_task(subscription.get())
                done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
                if receiver in done:
                    receiver.result()
                    logger.debug("Change subscriber disconnected")
                    break
                await websocket.send_json(getter.result().to_dict())
        except WebSocketDisconnect:
            logger.debug("Change subscriber disconnected")
        finally:
            for task in (getter, receiver):
                if task is not None and not task.done():
                    task.cancel()
