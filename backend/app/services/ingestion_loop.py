"""IngestionLoop: fixed-interval collection of readings for Online nodes.

Each cycle:
1. Loads all grid nodes with status Online
2. Asks the ReadingSource for one reading per node
3. Stores the whole batch in one transaction
4. Runs the ThresholdEvaluator on every stored reading
5. Publishes readings/alarms (when a publisher is configured)

A failing cycle is logged and the loop carries on after the normal delay.
``stop()`` wakes the inter-cycle wait; a running cycle finishes first.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from core.errors import StorageUnavailableError
from models import Alarm, SensorReading, utcnow
from services.event_publisher import EventPublisher
from services.reading_source import ReadingSource
from services.repository import GridRepository
from services.threshold_evaluator import ThresholdEvaluator

logger = logging.getLogger("gridos.ingestion_loop")


@dataclass
class CycleResult:
    readings: list[SensorReading] = field(default_factory=list)
    alarms: list[Alarm] = field(default_factory=list)
    failed_evaluations: int = 0


class IngestionLoop:

    def __init__(
        self,
        repository: GridRepository,
        evaluator: ThresholdEvaluator,
        source: ReadingSource,
        *,
        interval: float = 30.0,
        publisher: EventPublisher | None = None,
    ):
        self.repository = repository
        self.evaluator = evaluator
        self.source = source
        self.interval = interval
        self.publisher = publisher
        self.cycles = 0
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    async def start(self) -> None:
        self._stop_event.clear()
        logger.info(
            "IngestionLoop started (every %.1fs, source=%s)",
            self.interval, type(self.source).__name__,
        )

        while not self._stop_event.is_set():
            try:
                await self.run_cycle()
            except Exception as exc:
                logger.error("IngestionLoop cycle error: %s", exc, exc_info=True)
            self.cycles += 1

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

        logger.info("IngestionLoop stopped after %d cycles", self.cycles)

    async def stop(self) -> None:
        self._stop_event.set()

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> CycleResult:
        result = CycleResult()
        nodes = await self.repository.list_online_nodes()
        if not nodes:
            logger.debug("No online nodes, nothing to collect")
            return result

        now = utcnow()
        batch = [await self.source.collect(node, now) for node in nodes]
        result.readings = await self.repository.create_readings(batch)

        for reading in result.readings:
            try:
                result.alarms.extend(await self.evaluator.evaluate_and_raise(reading))
            except StorageUnavailableError as exc:
                result.failed_evaluations += 1
                logger.error(
                    "Alarm write failed for node=%d reading=%s: %s",
                    reading.grid_node_id, reading.id, exc,
                )

        if self.publisher is not None:
            for reading in result.readings:
                await self.publisher.publish_reading(reading)
            for alarm in result.alarms:
                await self.publisher.publish_alarm(alarm)

        logger.debug(
            "Collected metrics for %d nodes (%d alarms)",
            len(result.readings), len(result.alarms),
        )
        return result
