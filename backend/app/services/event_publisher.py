"""EventPublisher: pushes new readings and alarms to Redis.

Channels:
  grid:readings  one message per stored reading
  grid:alarms    one message per raised or transitioned alarm
Latest reading per node is also kept under ``node:{id}:latest``.
Publishing is best effort: failures are logged and never propagate.
"""
from __future__ import annotations

import json
import logging

from redis.asyncio import Redis

from models import Alarm, SensorReading

logger = logging.getLogger("gridos.event_publisher")

READINGS_CHANNEL = "grid:readings"
ALARMS_CHANNEL = "grid:alarms"


def reading_payload(reading: SensorReading) -> dict:
    return {
        "type": "reading",
        "id": reading.id,
        "grid_node_id": reading.grid_node_id,
        "timestamp": reading.timestamp.isoformat(),
        "voltage": reading.voltage,
        "current": reading.current,
        "power": reading.power,
        "frequency": reading.frequency,
        "temperature": reading.temperature,
        "power_factor": reading.power_factor,
    }


def alarm_payload(alarm: Alarm) -> dict:
    return {
        "type": "alarm",
        "id": alarm.id,
        "grid_node_id": alarm.grid_node_id,
        "alarm_code": alarm.alarm_code,
        "severity": alarm.severity.value,
        "status": alarm.status.value,
        "message": alarm.message,
        "raised_at": alarm.raised_at.isoformat(),
    }


class EventPublisher:

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish_reading(self, reading: SensorReading) -> None:
        json_str = json.dumps(reading_payload(reading), default=str)
        try:
            await self.redis.set(f"node:{reading.grid_node_id}:latest", json_str)
            await self.redis.publish(READINGS_CHANNEL, json_str)
        except Exception as exc:
            logger.warning("Publish reading failed: %s", exc)

    async def publish_alarm(self, alarm: Alarm) -> None:
        json_str = json.dumps(alarm_payload(alarm), default=str)
        try:
            await self.redis.publish(ALARMS_CHANNEL, json_str)
        except Exception as exc:
            logger.warning("Publish alarm failed: %s", exc)
