from __future__ import annotations

import asyncio
from collections import defaultdict
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationHub:
    """Open notification websockets, keyed by profile id."""

    def __init__(self) -> None:
        self._sockets: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, profile_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._sockets[profile_id].add(websocket)

    async def disconnect(self, profile_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            self._discard(profile_id, [websocket])

    def _discard(self, profile_id: str, sockets: list[WebSocket]) -> None:
        active = self._sockets.get(profile_id)
        if active is None:
            return
        active.difference_update(sockets)
        if not active:
            del self._sockets[profile_id]

    async def publish(self, profile_id: str, payload: dict) -> int:
        async with self._lock:
            targets = list(self._sockets.get(profile_id, ()))

        delivered = 0
        dead: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_json(payload)
                delivered += 1
            except Exception:  # pragma: no cover - network/runtime dependent
                dead.append(websocket)

        if dead:
            async with self._lock:
                self._discard(profile_id, dead)
            logger.debug("Dropped %d dead notification socket(s) for %s", len(dead), profile_id)
        return delivered


notification_hub = NotificationHub()
