"""
Live feed: WebSocket endpoint plus Redis PubSub bridge.

WS /ws/live         push new readings and alarm changes to dashboards
redis_to_ws_bridge  background task, Redis PubSub to ConnectionManager.broadcast
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from redis.asyncio import Redis
from redis.exceptions import RedisError

from services.event_publisher import ALARMS_CHANNEL, READINGS_CHANNEL

logger = logging.getLogger("gridos.websocket")

router = APIRouter()


# ---------------------------------------------------------------------------
# Connection Manager
# ---------------------------------------------------------------------------

class ConnectionManager:
    """Manages active WebSocket connections and broadcasts messages."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.connections.append(ws)
        logger.info("WS client connected (%d total)", len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.connections:
            self.connections.remove(ws)
        logger.info("WS client disconnected (%d remaining)", len(self.connections))

    async def broadcast(self, message: str) -> None:
        dead: list[WebSocket] = []
        for ws in self.connections:
            try:
                await ws.send_text(message)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in self.connections:
                self.connections.remove(ws)
        if dead:
            logger.debug("Removed %d dead WS connections", len(dead))


manager = ConnectionManager()


async def get_latest_readings_from_redis(redis: Redis) -> list[dict]:
    """Scan Redis for node:*:latest keys and return the parsed readings."""
    readings: list[dict] = []
    cursor = 0
    while True:
        cursor, keys = await redis.scan(cursor=cursor, match="node:*:latest", count=100)
        for key in keys:
            raw = await redis.get(key)
            if raw:
                try:
                    readings.append(json.loads(raw))
                except (json.JSONDecodeError, TypeError):
                    logger.debug("Skipping unparsable snapshot key %s", key)
        if cursor == 0:
            break
    return readings


# ---------------------------------------------------------------------------
# WebSocket Endpoint
# ---------------------------------------------------------------------------

@router.websocket("/ws/live")
async def ws_live(websocket: WebSocket) -> None:
    await manager.connect(websocket)
    try:
        redis: Redis | None = getattr(websocket.app.state, "redis", None)
        snapshot: list[dict] = []
        if redis is not None:
            try:
                snapshot = await get_latest_readings_from_redis(redis)
            except (RedisError, OSError) as exc:
                logger.warning("Snapshot unavailable: %s", exc)
        await websocket.send_json({"type": "snapshot", "data": snapshot})

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception as exc:
        logger.debug("WS error: %s", exc)
        manager.disconnect(websocket)


# ---------------------------------------------------------------------------
# Redis -> WebSocket Bridge (background task)
# ---------------------------------------------------------------------------

async def redis_to_ws_bridge(redis: Redis) -> None:
    """Subscribe to the reading and alarm channels and broadcast to all WS clients."""
    logger.info("Redis->WS bridge started, subscribing to %s, %s", READINGS_CHANNEL, ALARMS_CHANNEL)
    pubsub = redis.pubsub()
    try:
        await pubsub.subscribe(READINGS_CHANNEL, ALARMS_CHANNEL)
        async for message in pubsub.listen():
            if message["type"] == "message":
                payload = message["data"]
                if isinstance(payload, bytes):
                    payload = payload.decode("utf-8")
                await manager.broadcast(payload)
    except Exception as exc:
        logger.error("Redis->WS bridge error: %s", exc)
    finally:
        # closing the connection drops the subscription
        await pubsub.aclose()
