from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger("frc_draft.ws")


@dataclass
class RoomChannel:
    room_id: int
    conns: set[WebSocket] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class DraftHub:
    """
    Fan-out of draft events to websocket subscribers, one channel per room.

    Holds no draft state: the database is the source of truth and clients re-read
    /drafts/{id}/state whenever they (re)connect.
    """

    def __init__(self) -> None:
        self._channels: dict[int, RoomChannel] = {}
        self._global_lock = asyncio.Lock()

    async def subscribe(self, room_id: int, ws: WebSocket) -> RoomChannel:
        async with self._global_lock:
            channel = self._channels.setdefault(room_id, RoomChannel(room_id=room_id))
        async with channel.lock:
            channel.conns.add(ws)
        return channel

    async def unsubscribe(self, channel: RoomChannel, ws: WebSocket) -> None:
        async with channel.lock:
            channel.conns.discard(ws)
            empty = not channel.conns
        if empty:
            async with self._global_lock:
                if self._channels.get(channel.room_id) is channel and not channel.conns:
                    del self._channels[channel.room_id]

    def subscriber_count(self, room_id: int) -> int:
        channel = self._channels.get(room_id)
        return len(channel.conns) if channel else 0

    async def broadcast(self, room_id: int, message: dict[str, Any]) -> None:
        channel = self._channels.get(room_id)
        if channel is None:
            return
        async with channel.lock:
            conns = list(channel.conns)
        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(message)
            except Exception:
                dead.append(ws)
        if dead:
            logger.info("dropping %s dead subscriber(s) room_id=%s", len(dead), room_id)
            async with channel.lock:
                for ws in dead:
                    channel.conns.discard(ws)


draft_hub = DraftHub()
