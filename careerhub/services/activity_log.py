"""
Activity log and live-stats helpers shared by the broadcast hub and the
admin client.
"""

import json
from collections import deque
from typing import Iterator, List, Optional, Union

from careerhub.core.config import get_settings
from careerhub.schemas.schemas import (
    ActivityEvent,
    ActivityFrame,
    LiveFrame,
    LiveStats,
    LiveStatsUpdate,
    live_frame_adapter,
)


def parse_frame(raw: Union[str, bytes, dict]) -> LiveFrame:
    """
    Decode one socket frame into its typed model.
    Raises ValueError for non-JSON payloads and unknown or malformed frames.
    """
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return live_frame_adapter.validate_python(data)


def merge_stats(stats: LiveStats, update: Union[LiveStatsUpdate, dict]) -> LiveStats:
    """Shallow-merge a partial update into stats in place. Last write wins per field."""
    if isinstance(update, dict):
        update = LiveStatsUpdate.model_validate(update)
    for field in update.model_fields_set:
        value = getattr(update, field)
        if value is not None:
            setattr(stats, field, value)
    return stats


class ActivityLog:
    """
    Bounded, most-recent-first activity history.
    Appending to a full log evicts the oldest entry.
    """

    def __init__(self, limit: Optional[int] = None):
        if limit is None:
            limit = get_settings().activity_history_limit
        self.limit = limit
        self._events: deque = deque(maxlen=limit)

    def append(self, event: ActivityEvent) -> Optional[ActivityEvent]:
        """Add an event; returns the evicted event, if any."""
        evicted = self._events[-1] if self._events and len(self._events) == self.limit else None
        self._events.appendleft(event)
        return evicted

    def record(self, frame: ActivityFrame) -> ActivityEvent:
        """Build an event (fresh id and timestamp) from an activity frame and append it."""
        event = ActivityEvent(
            category=frame.activity_type,
            actor=frame.user,
            description=frame.action,
            severity=frame.status,
        )
        self.append(event)
        return event

    def recent(self, count: Optional[int] = None) -> List[ActivityEvent]:
        events = list(self._events)
        return events if count is None else events[:count]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[ActivityEvent]:
        return iter(self._events)
