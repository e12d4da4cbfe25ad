"""Tests for the activity log, stats merging and the reconnecting admin client."""

import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedError

from careerhub.schemas.schemas import (
    ActivityCategory,
    ActivityEvent,
    ActivityFrame,
    ChannelHealth,
    LiveStats,
    LiveStatsUpdate,
    StatsUpdateFrame,
)
from careerhub.services.activity_hub import encode_frame
from careerhub.services.activity_log import ActivityLog, merge_stats, parse_frame
from careerhub.services.live_feed import FixedDelayRetryPolicy, LiveActivityClient


def activity_json(n: int) -> str:
    return encode_frame(ActivityFrame(activity_type=ActivityCategory.login, user=f"user{n}", action="Logged in"))


def stats_json(**fields) -> str:
    return json.dumps({"type": "stats_update", "stats": fields})


class FakeSocket:
    """Async-iterable socket yielding canned frames, then ending or raising."""

    def __init__(self, frames=(), error=None, on_open=None):
        self.frames = list(frames)
        self.error = error
        self.on_open = on_open
        self.sent = []
        self.closed = False

    async def _iterate(self):
        if self.on_open is not None:
            await self.on_open()
        for frame in self.frames:
            yield frame
        if self.error is not None:
            raise self.error

    def __aiter__(self):
        return self._iterate()

    async def send(self, text):
        self.sent.append(text)

    async def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, socket):
        self.socket = socket

    async def __aenter__(self):
        return self.socket

    async def __aexit__(self, *exc):
        return False


class FakeConnector:
    """Hands out one scripted outcome per connect() call: a FakeSocket or an exception."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeConnection(outcome)


class FakeSleep:
    """Records delays and closes the client after `stop_after` sleeps."""

    def __init__(self, stop_after=1):
        self.stop_after = stop_after
        self.delays = []
        self.client = None

    async def __call__(self, delay):
        self.delays.append(delay)
        if len(self.delays) >= self.stop_after:
            await self.client.close()


def make_client(connector, stop_after=1, **kwargs):
    sleep = FakeSleep(stop_after)
    client = LiveActivityClient(
        "ws://feed.test/ws/admin?token=t",
        retry_policy=FixedDelayRetryPolicy(3.0),
        connect=connector,
        sleep=sleep,
        **kwargs,
    )
    sleep.client = client
    return client, sleep


# ---------------------------------------------------------------------------
# ActivityLog
# ---------------------------------------------------------------------------


class TestActivityLog:
    def test_keeps_most_recent_fifty(self) -> None:
        log = ActivityLog(50)
        for n in range(51):
            log.record(ActivityFrame(activity_type=ActivityCategory.login, user=f"user{n}", action="Logged in"))

        assert len(log) == 50
        actors = [event.actor for event in log]
        assert actors[0] == "user50"
        assert actors[-1] == "user1"
        assert "user0" not in actors

    def test_append_returns_evicted_event(self) -> None:
        log = ActivityLog(2)
        first = ActivityEvent(category=ActivityCategory.system, actor="a", description="one")
        second = ActivityEvent(category=ActivityCategory.system, actor="b", description="two")
        third = ActivityEvent(category=ActivityCategory.system, actor="c", description="three")

        assert log.append(first) is None
        assert log.append(second) is None
        assert log.append(third) is first
        assert log.recent() == [third, second]

    def test_recorded_events_get_unique_ids(self) -> None:
        log = ActivityLog(10)
        frame = ActivityFrame(activity_type=ActivityCategory.registration, user="x", action="Registered")
        assert log.record(frame).id != log.record(frame).id

    def test_recent_count(self) -> None:
        log = ActivityLog(10)
        for n in range(5):
            log.record(ActivityFrame(activity_type=ActivityCategory.login, user=f"u{n}", action="Logged in"))
        assert [e.actor for e in log.recent(2)] == ["u4", "u3"]

    def test_default_limit_from_settings(self) -> None:
        assert ActivityLog().limit == 50


# ---------------------------------------------------------------------------
# Frames and stats
# ---------------------------------------------------------------------------


class TestFramesAndStats:
    def test_parse_activity_frame(self) -> None:
        frame = parse_frame(json.dumps({
            "type": "activity", "activityType": "login", "user": "asha", "action": "Logged in", "status": "warning",
        }))
        assert isinstance(frame, ActivityFrame)
        assert frame.status.value == "warning"

    def test_parse_stats_frame(self) -> None:
        frame = parse_frame(stats_json(totalUsers=12))
        assert isinstance(frame, StatsUpdateFrame)
        assert frame.stats.total_users == 12

    @pytest.mark.parametrize("raw", [
        "not json",
        json.dumps({"type": "telemetry"}),
        json.dumps({"type": "activity", "user": "missing fields"}),
    ])
    def test_bad_frames_raise_value_error(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_frame(raw)

    def test_partial_merge_keeps_other_fields(self) -> None:
        stats = LiveStats(total_users=5, active_today=2)
        merge_stats(stats, {"activeToday": 9})
        assert stats.total_users == 5
        assert stats.active_today == 9
        assert stats.system_uptime_percent == 100.0

    def test_merge_is_idempotent(self) -> None:
        update = LiveStatsUpdate(total_users=40, system_uptime_percent=99.5)
        once = merge_stats(LiveStats(), update).model_dump()
        twice = merge_stats(merge_stats(LiveStats(), update), update).model_dump()
        assert once == twice

    def test_unknown_stats_keys_ignored(self) -> None:
        stats = merge_stats(LiveStats(), {"totalUsers": 3, "cpuLoad": 0.9})
        assert stats.total_users == 3
        assert not hasattr(stats, "cpu_load")


# ---------------------------------------------------------------------------
# LiveActivityClient
# ---------------------------------------------------------------------------


class TestLiveActivityClient:
    def test_fixed_delay_policy(self) -> None:
        policy = FixedDelayRetryPolicy(3.0)
        assert [policy.delay_for(n) for n in range(1, 6)] == [3.0] * 5

    def test_default_delay_from_settings(self) -> None:
        assert FixedDelayRetryPolicy().delay_for(1) == 3.0

    def test_consumes_frames_into_history_and_stats(self) -> None:
        socket = FakeSocket([activity_json(n) for n in range(51)] + [stats_json(totalUsers=7, activeToday=3)])
        client, sleep = make_client(FakeConnector(socket), history_limit=50)

        asyncio.run(client.run())

        assert len(client.history) == 50
        assert client.history.recent(1)[0].actor == "user50"
        assert client.stats.total_users == 7
        assert client.stats.active_today == 3

    def test_clean_close_reconnects_after_fixed_delay(self) -> None:
        connector = FakeConnector(FakeSocket([activity_json(1)]), FakeSocket([activity_json(2)]))
        client, sleep = make_client(connector, stop_after=2)

        asyncio.run(client.run())

        assert len(connector.urls) == 2
        assert sleep.delays == [3.0, 3.0]
        assert client.health_history == [
            ChannelHealth.connecting,
            ChannelHealth.healthy,
            ChannelHealth.degraded,
            ChannelHealth.healthy,
            ChannelHealth.degraded,
        ]
        assert [e.actor for e in client.history] == ["user2", "user1"]

    def test_abnormal_close_degrades_without_failing(self) -> None:
        socket = FakeSocket([activity_json(1)], error=ConnectionClosedError(None, None))
        client, sleep = make_client(FakeConnector(socket))

        asyncio.run(client.run())

        assert ChannelHealth.failed not in client.health_history
        assert client.health is ChannelHealth.degraded
        assert sleep.delays == [3.0]

    def test_transport_error_fails_then_degrades(self) -> None:
        connector = FakeConnector(ConnectionRefusedError("refused"), FakeSocket([]))
        client, sleep = make_client(connector, stop_after=2)

        asyncio.run(client.run())

        assert client.health_history[:4] == [
            ChannelHealth.connecting,
            ChannelHealth.failed,
            ChannelHealth.degraded,
            ChannelHealth.healthy,
        ]
        assert len(connector.urls) == 2

    def test_malformed_frames_are_skipped(self) -> None:
        socket = FakeSocket(["{broken", json.dumps({"type": "telemetry"}), activity_json(1)])
        client, _ = make_client(FakeConnector(socket))

        asyncio.run(client.run())

        assert [e.actor for e in client.history] == ["user1"]

    def test_announcement_dropped_unless_healthy(self) -> None:
        client, _ = make_client(FakeConnector())
        assert client.health is ChannelHealth.connecting
        assert asyncio.run(client.publish_announcement("Drive", "Tomorrow 10am")) is False

    def test_announcement_sent_while_healthy(self) -> None:
        results = []

        async def announce():
            results.append(await client.publish_announcement("Placement drive", "Tomorrow 10am", "high"))

        socket = FakeSocket(on_open=announce)
        client, _ = make_client(FakeConnector(socket))

        asyncio.run(client.run())

        assert results == [True]
        sent = json.loads(socket.sent[0])
        assert sent["type"] == "announcement"
        assert sent["title"] == "Placement drive"
        assert sent["priority"] == "high"

    def test_announcement_after_disconnect_is_dropped(self) -> None:
        client, _ = make_client(FakeConnector(FakeSocket([])))
        asyncio.run(client.run())
        assert client.health is ChannelHealth.degraded
        assert asyncio.run(client.publish_announcement("Late", "Too late")) is False

    def test_close_stops_reconnecting(self) -> None:
        client, sleep = make_client(FakeConnector(FakeSocket([])))
        asyncio.run(client.close())
        asyncio.run(client.run())
        assert sleep.delays == []
        assert client.health is ChannelHealth.connecting
