"""
Live Feed Client - the admin side of the activity socket.

Keeps a bounded activity history and merged live stats for one admin
connection, and reconnects forever after a disconnect using a RetryPolicy.

Channel health:
    connecting -> healthy            connected
    healthy    -> degraded           socket closed, reconnect scheduled
    *          -> failed -> degraded transport error, then close handling
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from careerhub.core.config import get_settings
from careerhub.schemas.schemas import (
    ActivityFrame,
    AnnouncementFrame,
    ChannelHealth,
    LiveStats,
    StatsUpdateFrame,
)
from careerhub.services.activity_hub import encode_frame
from careerhub.services.activity_log import ActivityLog, merge_stats, parse_frame

logger = logging.getLogger(__name__)


class RetryPolicy(ABC):
    """Maps a reconnect attempt number (1-based) to a delay in seconds."""

    @abstractmethod
    def delay_for(self, attempt: int) -> float:
        ...


class FixedDelayRetryPolicy(RetryPolicy):
    """Same delay for every attempt, no growth."""

    def __init__(self, delay: Optional[float] = None):
        if delay is None:
            delay = get_settings().reconnect_delay_seconds
        self.delay = delay

    def delay_for(self, attempt: int) -> float:
        return self.delay


class LiveActivityClient:

    def __init__(
        self,
        url: str,
        retry_policy: Optional[RetryPolicy] = None,
        history_limit: Optional[int] = None,
        connect=None,
        sleep=None,
    ):
        self.url = url
        self.retry_policy = retry_policy or FixedDelayRetryPolicy()
        self.history = ActivityLog(history_limit)
        self.stats = LiveStats()
        self.health = ChannelHealth.connecting
        self.health_history: List[ChannelHealth] = [self.health]
        self.reconnect_attempts = 0
        self._connect = connect or websockets.connect
        self._sleep = sleep or asyncio.sleep
        self._ws = None
        self._closed = False

    def _set_health(self, health: ChannelHealth) -> None:
        if health is not self.health:
            logger.info("Live feed %s -> %s", self.health.value, health.value)
        self.health = health
        self.health_history.append(health)

    def handle_frame(self, raw) -> bool:
        """Apply one inbound frame. Returns False for frames that were ignored."""
        try:
            frame = parse_frame(raw)
        except ValueError as e:
            logger.warning("Ignoring malformed live frame: %s", e)
            return False

        if isinstance(frame, ActivityFrame):
            self.history.record(frame)
        elif isinstance(frame, StatsUpdateFrame):
            merge_stats(self.stats, frame.stats)
        else:
            logger.debug("Ignoring %s frame", frame.type)
            return False
        return True

    async def _run_connection(self) -> None:
        async with self._connect(self.url) as ws:
            self._ws = ws
            self.reconnect_attempts = 0
            self._set_health(ChannelHealth.healthy)
            async for raw in ws:
                self.handle_frame(raw)

    async def run(self) -> None:
        """Connect and consume frames until close() is called."""
        while not self._closed:
            try:
                await self._run_connection()
            except ConnectionClosed as e:
                logger.info("Live feed closed: %s", e)
            except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                logger.warning("Live feed transport error: %s", e)
                self._set_health(ChannelHealth.failed)
            finally:
                self._ws = None

            if self._closed:
                break
            self._set_health(ChannelHealth.degraded)
            self.reconnect_attempts += 1
            delay = self.retry_policy.delay_for(self.reconnect_attempts)
            logger.info("Reconnecting live feed in %.1fs (attempt %d)", delay, self.reconnect_attempts)
            await self._sleep(delay)

    async def publish_announcement(self, title: str, message: str, priority: str = "normal") -> bool:
        """
        Fire-and-forget announcement. Dropped silently unless the channel
        is healthy; never acknowledged or retried.
        """
        ws = self._ws
        if self.health is not ChannelHealth.healthy or ws is None:
            logger.debug("Announcement dropped, channel %s", self.health.value)
            return False
        frame = AnnouncementFrame(title=title, message=message, priority=priority)
        try:
            await ws.send(encode_frame(frame))
        except ConnectionClosed:
            logger.debug("Announcement dropped, socket closed during send")
            return False
        return True

    async def close(self) -> None:
        """Stop reconnecting and close the socket, best effort."""
        self._closed = True
        ws = self._ws
        if ws is not None:
            try:
                await ws.close()
            except (OSError, WebSocketException) as e:
                logger.debug("Error while closing live feed: %s", e)
