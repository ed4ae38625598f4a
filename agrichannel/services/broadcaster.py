"""
Realtime fan-out to connected feed viewers.

Events are JSON text frames ``{"event": <name>, "data": <payload>}``:

* ``new_post``      full listing, sent after a create
* ``deleted_post``  ``{"id": <listing id>}``, sent after a delete
* ``online_count``  number of connected viewers, sent on every connect and
                    disconnect and once per heartbeat interval

Delivery is best effort. A viewer only sees events emitted while it is
connected; the listing endpoint remains the source of truth.
"""

import asyncio
import logging
import threading
from typing import Any, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

NEW_POST = "new_post"
DELETED_POST = "deleted_post"
ONLINE_COUNT = "online_count"


class OnlineCounter:
    """Connected-viewer count that never drops below zero."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        with self._lock:
            self._value = max(0, self._value - 1)
            return self._value


class Broadcaster:
    def __init__(self, heartbeat_interval: float = 1.0):
        self.heartbeat_interval = heartbeat_interval
        self.counter = OnlineCounter()
        self._connections: Set[WebSocket] = set()
        self._heartbeat_task: Optional[asyncio.Task] = None

    @property
    def online(self) -> int:
        return self.counter.value

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        self.counter.increment()
        await self.emit_online_count()

    async def disconnect(self, websocket: WebSocket) -> None:
        if websocket not in self._connections:
            return
        self._connections.discard(websocket)
        self.counter.decrement()
        await self.emit_online_count()

    async def broadcast(self, event: str, data: Any) -> int:
        """Send one event to every current viewer; returns how many got it."""
        message = {"event": event, "data": data}
        delivered = 0
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as exc:
                # the receive loop of that socket handles the disconnect
                logger.debug("Dropping %s for a closed viewer: %s", event, exc)
        return delivered

    async def broadcast_created(self, payload: dict) -> int:
        return await self.broadcast(NEW_POST, payload)

    async def broadcast_deleted(self, listing_id: int) -> int:
        return await self.broadcast(DELETED_POST, {"id": listing_id})

    async def emit_online_count(self) -> int:
        return await self.broadcast(ONLINE_COUNT, self.counter.value)

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            await self.emit_online_count()

    def start(self) -> None:
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.get_running_loop().create_task(self._heartbeat())

    async def stop(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
