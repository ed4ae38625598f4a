import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class KeepAlive:
    """
    Periodically requests our own ``/ping`` so hosts that suspend idle
    processes keep the server awake. Every failure is ignored.
    """

    def __init__(self, url: str, interval: float = 240.0, timeout: float = 2.0):
        self.url = url
        self.interval = interval
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    async def ping_once(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.url)
            return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.debug("Keepalive ping to %s failed: %s", self.url, exc)
            return False

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.ping_once()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
