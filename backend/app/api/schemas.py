"""Pydantic request/response schemas shared by the grid and alarm routers."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from models import (
    AlarmSeverity,
    AlarmStatus,
    MaintenanceEventStatus,
    MaintenanceEventType,
    NodeStatus,
    NodeType,
)


# --- Alarms ---

class AlarmCreate(BaseModel):
    grid_node_id: int
    alarm_code: str = Field(min_length=1, max_length=20)
    severity: AlarmSeverity
    message: str = Field(min_length=1, max_length=500)


class AlarmOut(BaseModel):
    id: int
    grid_node_id: int
    alarm_code: str
    severity: AlarmSeverity
    message: str
    status: AlarmStatus
    raised_at: datetime
    acknowledged_at: datetime | None = None
    acknowledged_by: str | None = None
    resolved_at: datetime | None = None
    resolution: str | None = None

    model_config = {"from_attributes": True}


# --- Maintenance ---

class MaintenanceEventOut(BaseModel):
    id: int
    grid_node_id: int
    event_type: MaintenanceEventType
    description: str | None = None
    status: MaintenanceEventStatus
    scheduled_date: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    performed_by: str | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}


# --- Grid nodes ---

class GridNodeCreate(BaseModel):
    node_id: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    location: str | None = Field(None, max_length=200)
    node_type: NodeType
    capacity: float = Field(ge=0)
    status: NodeStatus = NodeStatus.Online
    installation_date: datetime
    last_maintenance_date: datetime | None = None


class GridNodeOut(BaseModel):
    id: int
    node_id: str
    name: str
    location: str | None
    node_type: NodeType
    capacity: float
    status: NodeStatus
    installation_date: datetime
    last_maintenance_date: datetime | None

    model_config = {"from_attributes": True}


class GridNodeSummaryOut(GridNodeOut):
    active_alarms: list[AlarmOut] = []


class GridNodeDetailOut(GridNodeOut):
    alarms: list[AlarmOut] = []
    maintenance_events: list[MaintenanceEventOut] = []


# --- Readings ---

class ReadingCreate(BaseModel):
    # upper bounds follow the Numeric(precision, scale) columns
    voltage: float = Field(ge=0, le=99_999_999.99)          # kV
    current: float = Field(ge=0, le=99_999_999.99)          # A
    power: float = Field(ge=0, le=9_999_999_999.99)         # MW
    frequency: float = Field(ge=0, le=9_999.99)             # Hz
    temperature: float = Field(ge=-273.15, le=999.99)       # °C
    power_factor: float = Field(ge=0, le=1)


class ReadingOut(BaseModel):
    id: int
    grid_node_id: int
    timestamp: datetime
    voltage: float
    current: float
    power: float
    frequency: float
    temperature: float
    power_factor: float

    model_config = {"from_attributes": True}


# --- Statistics ---

class PeriodOut(BaseModel):
    start: datetime
    end: datetime


class MetricSummaryOut(BaseModel):
    avg: float
    min: float
    max: float

    model_config = {"from_attributes": True}


class StatisticsOut(BaseModel):
    has_data: bool
    period: PeriodOut
    data_points: int = 0
    message: str | None = None
    voltage: MetricSummaryOut | None = None
    power: MetricSummaryOut | None = None
    temperature: MetricSummaryOut | None = None
