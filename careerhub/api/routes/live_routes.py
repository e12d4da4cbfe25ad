"""
Live Routes

WS /ws/admin?token=<jwt> - Admin live activity feed

Frames are JSON text: `activity`, `stats_update`, `announcement`.
Frames an admin sends are relayed to the other admins.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from careerhub.core.auth import authenticate_socket_admin
from careerhub.services.activity_hub import ActivityHub, get_activity_hub

router = APIRouter(tags=["Live"])
logger = logging.getLogger(__name__)


@router.websocket("/ws/admin")
async def admin_feed(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    hub: ActivityHub = Depends(get_activity_hub)
):
    admin = authenticate_socket_admin(token)
    if admin is None:
        logger.warning("Rejected admin socket without a valid admin token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await hub.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame on admin socket")
                continue
            await hub.handle_incoming(websocket, raw, actor=admin["email"] or "admin")
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
