from models.base import Base, async_session, create_schema, engine, utcnow
from models.grid_node import GridNode, NodeStatus, NodeType
from models.sensor_reading import SensorReading
from models.alarm import OPEN_STATUSES, Alarm, AlarmSeverity, AlarmStatus
from models.maintenance_event import (
    MaintenanceEvent,
    MaintenanceEventStatus,
    MaintenanceEventType,
)

__all__ = [
    "Base",
    "async_session",
    "create_schema",
    "engine",
    "utcnow",
    "GridNode",
    "NodeStatus",
    "NodeType",
    "SensorReading",
    "Alarm",
    "AlarmSeverity",
    "AlarmStatus",
    "OPEN_STATUSES",
    "MaintenanceEvent",
    "MaintenanceEventStatus",
    "MaintenanceEventType",
]
