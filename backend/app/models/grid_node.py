"""Grid node model: one monitored physical asset.

Readings, alarms and maintenance events reference a node by ``grid_node_id``
only; deleting a node cascades at the database level.
"""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class NodeType(str, enum.Enum):
    Substation = "Substation"
    Distribution = "Distribution"
    Transmission = "Transmission"


class NodeStatus(str, enum.Enum):
    Online = "Online"
    Offline = "Offline"
    Maintenance = "Maintenance"
    Alarm = "Alarm"


class GridNode(TimestampMixin, Base):
    __tablename__ = "grid_nodes"

    id: Mapped[int] = mapped_column(primary_key=True)
    node_id: Mapped[str] = mapped_column(String(50), unique=True)  # "GRID-NODE-001"
    name: Mapped[str] = mapped_column(String(100))
    location: Mapped[str | None] = mapped_column(String(200), default=None)
    node_type: Mapped[NodeType]
    capacity: Mapped[float] = mapped_column(Float)  # MW
    status: Mapped[NodeStatus] = mapped_column(default=NodeStatus.Online)
    installation_date: Mapped[datetime] = mapped_column()
    last_maintenance_date: Mapped[datetime | None] = mapped_column(default=None)

    def __repr__(self) -> str:
        return f"<GridNode {self.node_id} ({self.node_type.value}, {self.status.value})>"
