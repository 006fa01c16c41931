"""REST API for grid nodes, their readings and statistics."""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_monitoring
from api.schemas import (
    AlarmOut,
    GridNodeCreate,
    GridNodeDetailOut,
    GridNodeOut,
    GridNodeSummaryOut,
    MaintenanceEventOut,
    MetricSummaryOut,
    PeriodOut,
    ReadingCreate,
    ReadingOut,
    StatisticsOut,
)
from config import settings
from models import GridNode, SensorReading
from services.monitoring import EmptyStatistics, GridMonitoringService

logger = logging.getLogger("gridos.api.grid_nodes")

router = APIRouter(prefix="/api/gridnodes", tags=["gridnodes"])


def _naive_utc(ts: datetime | None) -> datetime | None:
    """Query timestamps may carry an offset; storage is naive UTC."""
    if ts is not None and ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


@router.get("", response_model=list[GridNodeSummaryOut])
async def list_nodes(monitoring: GridMonitoringService = Depends(get_monitoring)):
    logger.info("Retrieving all grid nodes")
    summaries = await monitoring.list_nodes()
    return [
        GridNodeSummaryOut(
            **GridNodeOut.model_validate(s.node).model_dump(),
            active_alarms=[AlarmOut.model_validate(a) for a in s.active_alarms],
        )
        for s in summaries
    ]


@router.post("", response_model=GridNodeOut, status_code=201)
async def create_node(
    data: GridNodeCreate,
    monitoring: GridMonitoringService = Depends(get_monitoring),
):
    fields = data.model_dump()
    fields["installation_date"] = _naive_utc(fields["installation_date"])
    fields["last_maintenance_date"] = _naive_utc(fields["last_maintenance_date"])
    return await monitoring.create_node(GridNode(**fields))


@router.get("/{node_id}", response_model=GridNodeDetailOut)
async def get_node(node_id: int, monitoring: GridMonitoringService = Depends(get_monitoring)):
    logger.info("Retrieving grid node %d", node_id)
    detail = await monitoring.get_node(node_id)
    return GridNodeDetailOut(
        **GridNodeOut.model_validate(detail.node).model_dump(),
        alarms=[AlarmOut.model_validate(a) for a in detail.alarms],
        maintenance_events=[
            MaintenanceEventOut.model_validate(e) for e in detail.maintenance_events
        ],
    )


@router.get("/{node_id}/readings", response_model=list[ReadingOut])
async def get_readings(
    node_id: int,
    limit: int = Query(settings.READINGS_DEFAULT_LIMIT, ge=1, le=settings.READINGS_MAX_LIMIT),
    monitoring: GridMonitoringService = Depends(get_monitoring),
):
    """Latest readings for a node, newest first."""
    logger.info("Retrieving sensor readings for grid node %d", node_id)
    return await monitoring.latest_readings(node_id, limit)


@router.post("/{node_id}/readings", response_model=ReadingOut, status_code=201)
async def add_reading(
    node_id: int,
    data: ReadingCreate,
    monitoring: GridMonitoringService = Depends(get_monitoring),
):
    """Store a reading (timestamped server-side) and run alarm rules on it."""
    return await monitoring.add_reading(node_id, SensorReading(**data.model_dump()))


@router.get("/{node_id}/stats", response_model=StatisticsOut)
async def get_statistics(
    node_id: int,
    start: Optional[datetime] = Query(None, alias="from", description="Start (ISO 8601), default now-24h"),
    end: Optional[datetime] = Query(None, alias="to", description="End (ISO 8601), default now"),
    monitoring: GridMonitoringService = Depends(get_monitoring),
):
    stats = await monitoring.statistics(node_id, _naive_utc(start), _naive_utc(end))
    period = PeriodOut(start=stats.start, end=stats.end)
    if isinstance(stats, EmptyStatistics):
        return StatisticsOut(has_data=False, period=period, message=stats.message)
    return StatisticsOut(
        has_data=True,
        period=period,
        data_points=stats.count,
        voltage=MetricSummaryOut.model_validate(stats.voltage),
        power=MetricSummaryOut.model_validate(stats.power),
        temperature=MetricSummaryOut.model_validate(stats.temperature),
    )
