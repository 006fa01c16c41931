"""Maintenance events: plain records attached to a grid node."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MaintenanceEventType(str, enum.Enum):
    Scheduled = "Scheduled"
    Emergency = "Emergency"
    Preventive = "Preventive"


class MaintenanceEventStatus(str, enum.Enum):
    Planned = "Planned"
    InProgress = "InProgress"
    Completed = "Completed"
    Cancelled = "Cancelled"


class MaintenanceEvent(Base):
    __tablename__ = "maintenance_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    grid_node_id: Mapped[int] = mapped_column(
        ForeignKey("grid_nodes.id", ondelete="CASCADE")
    )
    event_type: Mapped[MaintenanceEventType]
    description: Mapped[str | None] = mapped_column(String(500), default=None)
    status: Mapped[MaintenanceEventStatus] = mapped_column(
        default=MaintenanceEventStatus.Planned
    )
    scheduled_date: Mapped[datetime] = mapped_column()
    started_at: Mapped[datetime | None] = mapped_column(default=None)
    completed_at: Mapped[datetime | None] = mapped_column(default=None)
    performed_by: Mapped[str | None] = mapped_column(String(100), default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)
