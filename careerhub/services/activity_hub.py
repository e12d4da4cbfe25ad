"""
Activity Hub - server side of the admin live feed.

Every connected admin socket receives `activity`, `stats_update` and
`announcement` frames. Delivery is best effort and at most once: a socket
whose send fails is dropped, nothing is queued or retried.
"""

import logging
from typing import Optional, Set

from fastapi import WebSocket

from careerhub.schemas.schemas import (
    ActivityCategory,
    ActivityEvent,
    ActivityFrame,
    AnnouncementFrame,
    LiveStats,
    LiveStatsUpdate,
    Severity,
    StatsUpdateFrame,
)
from careerhub.services.activity_log import ActivityLog, merge_stats, parse_frame

logger = logging.getLogger(__name__)


def encode_frame(frame) -> str:
    return frame.model_dump_json(by_alias=True, exclude_none=True)


class ActivityHub:

    def __init__(self, history_limit: Optional[int] = None):
        self.connections: Set[WebSocket] = set()
        self.history = ActivityLog(history_limit)
        self.stats = LiveStats()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.add(websocket)
        logger.info("Admin socket connected (%d open)", len(self.connections))
        snapshot = StatsUpdateFrame(stats=LiveStatsUpdate(**self.stats.model_dump()))
        await self._send(websocket, encode_frame(snapshot))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.connections:
            self.connections.discard(websocket)
            logger.info("Admin socket disconnected (%d open)", len(self.connections))

    async def _send(self, websocket: WebSocket, text: str) -> bool:
        try:
            await websocket.send_text(text)
            return True
        except Exception as e:
            logger.info("Dropping admin socket after failed send: %s", e)
            self.disconnect(websocket)
            return False

    async def broadcast(self, frame, exclude: Optional[WebSocket] = None) -> int:
        """Send a frame to every connected admin except `exclude`. Returns the delivery count."""
        text = encode_frame(frame)
        delivered = 0
        for websocket in list(self.connections):
            if websocket is exclude:
                continue
            if await self._send(websocket, text):
                delivered += 1
        return delivered

    # ------------------------------------------------------------
    # Publishing from server code
    # ------------------------------------------------------------

    async def publish_activity(
        self,
        category: ActivityCategory,
        user: str,
        action: str,
        status: Severity = Severity.success
    ) -> ActivityEvent:
        frame = ActivityFrame(activity_type=category, user=user, action=action, status=status)
        event = self.history.record(frame)
        await self.broadcast(frame)
        return event

    async def publish_stats(self, update: LiveStatsUpdate) -> LiveStats:
        merge_stats(self.stats, update)
        await self.broadcast(StatsUpdateFrame(stats=update))
        return self.stats

    async def publish_announcement(self, title: str, message: str, priority: str = "normal", actor: str = "admin") -> int:
        frame = AnnouncementFrame(title=title, message=message, priority=priority)
        self._record_announcement(frame, actor)
        return await self.broadcast(frame)

    def _record_announcement(self, frame: AnnouncementFrame, actor: str) -> None:
        self.history.record(ActivityFrame(
            activity_type=ActivityCategory.system,
            user=actor,
            action=f"Announcement: {frame.title}",
        ))

    # ------------------------------------------------------------
    # Frames sent by admin clients
    # ------------------------------------------------------------

    async def handle_incoming(self, websocket: WebSocket, raw: str, actor: str = "admin") -> bool:
        """
        Apply a frame from one admin and relay it to the others.
        Malformed frames are logged and ignored.
        """
        try:
            frame = parse_frame(raw)
        except ValueError as e:
            logger.warning("Ignoring malformed admin frame: %s", e)
            return False

        if isinstance(frame, ActivityFrame):
            self.history.record(frame)
        elif isinstance(frame, StatsUpdateFrame):
            merge_stats(self.stats, frame.stats)
        elif isinstance(frame, AnnouncementFrame):
            self._record_announcement(frame, actor)

        await self.broadcast(frame, exclude=websocket)
        return True


_hub: ActivityHub = None


def get_activity_hub() -> ActivityHub:
    """Get or create the process-wide hub (singleton pattern)"""
    global _hub
    if _hub is None:
        _hub = ActivityHub()
    return _hub
