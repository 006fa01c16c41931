"""Reading sources for the ingestion loop.

SimulatedReadingSource emits values in a plausible band for each node.
A real telemetry feed plugs in by subclassing ReadingSource.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from datetime import datetime

from models import GridNode, SensorReading


class ReadingSource(ABC):

    @abstractmethod
    async def collect(self, node: GridNode, now: datetime) -> SensorReading:
        """Return one (unsaved) reading for ``node`` taken at ``now``."""


class SimulatedReadingSource(ReadingSource):
    """Uniform noise inside fixed bands; power scales with node capacity."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    async def collect(self, node: GridNode, now: datetime) -> SensorReading:
        u = self.rng.random
        return SensorReading(
            grid_node_id=node.id,
            timestamp=now,
            voltage=round(230 + u() * 10, 2),
            current=round(100 + u() * 50, 2),
            power=round(node.capacity * (0.7 + u() * 0.3), 2),
            frequency=round(50 + u() * 0.1 - 0.05, 3),
            temperature=round(45 + u() * 20, 2),
            power_factor=round(0.95 + u() * 0.05, 3),
        )
