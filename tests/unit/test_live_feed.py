"""Live feed: Redis snapshot, PubSub bridge and the /ws/live endpoint."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from core.websocket import (
    ConnectionManager,
    get_latest_readings_from_redis,
    manager,
    redis_to_ws_bridge,
)
from fakes import FakePubSub, FakeRedis
from main import app
from services.event_publisher import ALARMS_CHANNEL, READINGS_CHANNEL


class RecordingSocket:
    def __init__(self, broken: bool = False):
        self.broken = broken
        self.sent: list[str] = []

    async def send_text(self, message: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.fixture
def live_client():
    app.state.redis = None
    yield TestClient(app)
    app.state.redis = None


def test_snapshot_collects_latest_reading_per_node():
    redis = FakeRedis(store={
        "node:1:latest": json.dumps({"grid_node_id": 1, "temperature": 55.0}).encode(),
        "node:2:latest": b"not json",
        "other:key": b"{}",
    })

    readings = asyncio.run(get_latest_readings_from_redis(redis))

    assert readings == [{"grid_node_id": 1, "temperature": 55.0}]


def test_broadcast_drops_dead_connections():
    hub = ConnectionManager()
    alive, dead = RecordingSocket(), RecordingSocket(broken=True)
    hub.connections = [alive, dead]

    asyncio.run(hub.broadcast("hello"))

    assert alive.sent == ["hello"]
    assert hub.connections == [alive]


def test_bridge_forwards_channel_messages():
    pubsub = FakePubSub(messages=[
        {"type": "subscribe", "data": 1},
        {"type": "message", "data": b'{"type": "reading"}'},
        {"type": "message", "data": '{"type": "alarm"}'},
    ])
    socket = RecordingSocket()
    manager.connections.append(socket)
    try:
        asyncio.run(redis_to_ws_bridge(FakeRedis(pubsub=pubsub)))
    finally:
        manager.connections.remove(socket)

    assert pubsub.channels == (READINGS_CHANNEL, ALARMS_CHANNEL)
    assert socket.sent == ['{"type": "reading"}', '{"type": "alarm"}']
    assert pubsub.closed


def test_bridge_survives_unreachable_redis(caplog):
    pubsub = FakePubSub(fail_subscribe=RedisConnectionError("Error 111 connecting to 127.0.0.1:1"))

    with caplog.at_level("ERROR", logger="gridos.websocket"):
        asyncio.run(redis_to_ws_bridge(FakeRedis(pubsub=pubsub)))

    assert pubsub.closed
    assert "Error 111" in caplog.text


def test_ws_live_sends_snapshot_and_answers_ping(live_client):
    app.state.redis = FakeRedis(store={"node:1:latest": b'{"grid_node_id": 1}'})

    with live_client.websocket_connect("/ws/live") as ws:
        assert ws.receive_json() == {"type": "snapshot", "data": [{"grid_node_id": 1}]}
        ws.send_text("ping")
        assert ws.receive_text() == "pong"


def test_ws_live_snapshot_is_empty_when_redis_is_down(live_client):
    app.state.redis = FakeRedis(fail_with=RedisConnectionError("connection refused"))

    with live_client.websocket_connect("/ws/live") as ws:
        assert ws.receive_json() == {"type": "snapshot", "data": []}
