"""Alarm model: one raised condition on a grid node.

status: Active -> Acknowledged -> Resolved, or Active -> Resolved.
Resolved rows stay in the table as audit history.
"""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class AlarmSeverity(str, enum.Enum):
    Critical = "Critical"
    High = "High"
    Medium = "Medium"
    Low = "Low"


class AlarmStatus(str, enum.Enum):
    Active = "Active"
    Acknowledged = "Acknowledged"
    Resolved = "Resolved"


# Statuses shown in the "active alarms" list
OPEN_STATUSES = (AlarmStatus.Active, AlarmStatus.Acknowledged)


class Alarm(Base):
    __tablename__ = "alarms"

    __table_args__ = (
        Index("ix_alarms_status_severity", "status", "severity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    grid_node_id: Mapped[int] = mapped_column(
        ForeignKey("grid_nodes.id", ondelete="CASCADE")
    )
    alarm_code: Mapped[str] = mapped_column(String(20))
    severity: Mapped[AlarmSeverity]
    message: Mapped[str] = mapped_column(String(500))
    status: Mapped[AlarmStatus] = mapped_column(default=AlarmStatus.Active)
    raised_at: Mapped[datetime] = mapped_column()
    acknowledged_at: Mapped[datetime | None] = mapped_column(default=None)
    acknowledged_by: Mapped[str | None] = mapped_column(String(100), default=None)
    resolved_at: Mapped[datetime | None] = mapped_column(default=None)
    resolution: Mapped[str | None] = mapped_column(String(500), default=None)

    def __repr__(self) -> str:
        return f"<Alarm {self.alarm_code} node={self.grid_node_id} {self.status.value}>"
