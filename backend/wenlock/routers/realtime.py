from fastapi import APIRouter, WebSocket

router = APIRouter()


@router.websocket("/ws")
async def realtime_feed(websocket: WebSocket):
    """Push channel for state-change events. Client frames of any kind are ignored."""
    manager = websocket.app.state.broadcaster
    await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        manager.disconnect(websocket)
