"""Sensor readings: one row per node per measurement.

Written by the ingestion loop (batched per cycle) or by the readings API.
Rows are never updated.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class SensorReading(Base):
    __tablename__ = "sensor_readings"

    __table_args__ = (
        Index("ix_sensor_readings_node_ts", "grid_node_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    grid_node_id: Mapped[int] = mapped_column(
        ForeignKey("grid_nodes.id", ondelete="CASCADE")
    )
    timestamp: Mapped[datetime] = mapped_column()

    voltage: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))      # kV
    current: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))      # A
    power: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False))        # MW
    frequency: Mapped[float] = mapped_column(Numeric(6, 2, asdecimal=False))     # Hz
    temperature: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False))   # °C
    power_factor: Mapped[float] = mapped_column(Numeric(4, 3, asdecimal=False))

    def __repr__(self) -> str:
        return f"<SensorReading node={self.grid_node_id} @ {self.timestamp}>"
