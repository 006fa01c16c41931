"""REST API for the alarm lifecycle."""
import logging

from fastapi import APIRouter, Body, Depends

from api.deps import get_alarm_manager
from api.schemas import AlarmCreate, AlarmOut
from models import Alarm
from services.alarm_lifecycle import AlarmLifecycleManager

logger = logging.getLogger("gridos.api.alarms")

router = APIRouter(prefix="/api/alarms", tags=["alarms"])


@router.get("", response_model=list[AlarmOut])
async def list_active_alarms(manager: AlarmLifecycleManager = Depends(get_alarm_manager)):
    """Active and acknowledged alarms, most recently raised first."""
    return await manager.list_active()


@router.post("", response_model=AlarmOut, status_code=201)
async def create_alarm(
    data: AlarmCreate,
    manager: AlarmLifecycleManager = Depends(get_alarm_manager),
):
    return await manager.raise_alarm(Alarm(**data.model_dump()))


@router.post("/{alarm_id}/acknowledge", response_model=AlarmOut)
async def acknowledge_alarm(
    alarm_id: int,
    acknowledged_by: str = Body(..., min_length=1, max_length=100),
    manager: AlarmLifecycleManager = Depends(get_alarm_manager),
):
    return await manager.acknowledge(alarm_id, acknowledged_by)


@router.post("/{alarm_id}/resolve", response_model=AlarmOut)
async def resolve_alarm(
    alarm_id: int,
    resolution: str = Body(..., min_length=1, max_length=500),
    manager: AlarmLifecycleManager = Depends(get_alarm_manager),
):
    return await manager.resolve(alarm_id, resolution)
