from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from frc_draft.database import SessionLocal
from frc_draft.models import DraftRoom
from frc_draft.websocket.draft_manager import draft_hub

router = APIRouter(tags=["ws"])
logger = logging.getLogger("frc_draft.ws")


@router.websocket("/ws/draft/{room_id}")
async def draft_ws(ws: WebSocket, room_id: int):
    """
    Read-only event stream for one draft room.

    Messages: subscribed, participant_joined, draft_started, pick_made, draft_completed.
    Picks are made over HTTP; anything a client sends here is ignored.
    """
    await ws.accept()

    async with SessionLocal() as db:
        room = await db.get(DraftRoom, room_id)
        if room is None:
            await ws.send_json({"type": "error", "message": "room not found"})
            await ws.close()
            return
        status = room.status

    channel = await draft_hub.subscribe(room_id, ws)
    logger.info("ws subscribe room_id=%s subscribers=%s", room_id, draft_hub.subscriber_count(room_id))
    await ws.send_json({"type": "subscribed", "room_id": room_id, "status": status})

    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await draft_hub.unsubscribe(channel, ws)
        logger.info("ws unsubscribe room_id=%s", room_id)
