from fastapi import APIRouter, WebSocket

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def feed_socket(websocket: WebSocket):
    """Viewers only connect and disconnect; inbound frames are ignored."""
    broadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await broadcaster.disconnect(websocket)
