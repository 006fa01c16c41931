"""GridMonitoringService: read side for nodes, readings and statistics.

Also the entry point for readings posted through the API, which go through
the same ThresholdEvaluator as the ingestion loop.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Union

from config import settings
from core.errors import StorageUnavailableError, ValidationError
from models import (
    Alarm,
    AlarmStatus,
    GridNode,
    MaintenanceEvent,
    SensorReading,
    utcnow,
)
from services.event_publisher import EventPublisher
from services.repository import GridRepository
from services.threshold_evaluator import ThresholdEvaluator

logger = logging.getLogger("gridos.monitoring")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class NodeSummary:
    node: GridNode
    active_alarms: list[Alarm] = field(default_factory=list)


@dataclass
class NodeDetail:
    node: GridNode
    alarms: list[Alarm] = field(default_factory=list)
    maintenance_events: list[MaintenanceEvent] = field(default_factory=list)


@dataclass(frozen=True)
class MetricSummary:
    avg: float
    min: float
    max: float

    @classmethod
    def of(cls, values: list[float]) -> "MetricSummary":
        return cls(avg=sum(values) / len(values), min=min(values), max=max(values))


@dataclass(frozen=True)
class EmptyStatistics:
    start: datetime
    end: datetime
    message: str = "No data available for the specified period"


@dataclass(frozen=True)
class NodeStatistics:
    start: datetime
    end: datetime
    count: int
    voltage: MetricSummary
    power: MetricSummary
    temperature: MetricSummary


Statistics = Union[EmptyStatistics, NodeStatistics]


@dataclass(frozen=True)
class HealthReport:
    storage_reachable: bool
    grid_nodes_count: int | None
    readings_count: int | None
    timestamp: datetime
    error: str | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class GridMonitoringService:

    def __init__(
        self,
        repository: GridRepository,
        evaluator: ThresholdEvaluator,
        publisher: EventPublisher | None = None,
    ):
        self.repository = repository
        self.evaluator = evaluator
        self.publisher = publisher

    async def list_nodes(self) -> list[NodeSummary]:
        nodes = await self.repository.list_nodes()
        open_alarms = await self.repository.list_alarms([AlarmStatus.Active])
        by_node: dict[int, list[Alarm]] = {}
        for alarm in open_alarms:
            by_node.setdefault(alarm.grid_node_id, []).append(alarm)
        return [NodeSummary(node=n, active_alarms=by_node.get(n.id, [])) for n in nodes]

    async def create_node(self, node: GridNode) -> GridNode:
        created = await self.repository.create_node(node)
        logger.info("Grid node %s provisioned (id=%d)", created.node_id, created.id)
        return created

    async def get_node(self, node_id: int) -> NodeDetail:
        node = await self.repository.get_node(node_id)
        return NodeDetail(
            node=node,
            alarms=await self.repository.list_alarms(node_id=node_id),
            maintenance_events=await self.repository.list_maintenance_events(node_id),
        )

    async def latest_readings(self, node_id: int, limit: int) -> list[SensorReading]:
        await self.repository.get_node(node_id)
        return await self.repository.list_readings(node_id, limit=limit)

    async def add_reading(self, node_id: int, reading: SensorReading) -> SensorReading:
        """Store a reading for ``node_id`` stamped with the current time, then evaluate it."""
        await self.repository.get_node(node_id)
        reading.grid_node_id = node_id
        reading.timestamp = utcnow()
        created = await self.repository.create_reading(reading)
        logger.info("Added sensor reading for grid node %d", node_id)

        alarms = await self.evaluator.evaluate_and_raise(created)
        if self.publisher is not None:
            await self.publisher.publish_reading(created)
            for alarm in alarms:
                await self.publisher.publish_alarm(alarm)
        return created

    async def statistics(
        self,
        node_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Statistics:
        now = utcnow()
        end = end or now
        start = start or now - timedelta(hours=settings.STATS_DEFAULT_WINDOW_HOURS)
        if start > end:
            raise ValidationError("'from' must not be later than 'to'")

        await self.repository.get_node(node_id)

        readings = await self.repository.list_readings(node_id, start=start, end=end)
        if not readings:
            return EmptyStatistics(start=start, end=end)

        return NodeStatistics(
            start=start,
            end=end,
            count=len(readings),
            voltage=MetricSummary.of([r.voltage for r in readings]),
            power=MetricSummary.of([r.power for r in readings]),
            temperature=MetricSummary.of([r.temperature for r in readings]),
        )

    async def health(self) -> HealthReport:
        try:
            await self.repository.ping()
            nodes = await self.repository.count_nodes()
            readings = await self.repository.count_readings()
        except StorageUnavailableError as exc:
            logger.error("Health check failed: %s", exc)
            return HealthReport(
                storage_reachable=False,
                grid_nodes_count=None,
                readings_count=None,
                timestamp=utcnow(),
                error=str(exc),
            )
        return HealthReport(
            storage_reachable=True,
            grid_nodes_count=nodes,
            readings_count=readings,
            timestamp=utcnow(),
        )
