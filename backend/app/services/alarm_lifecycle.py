"""AlarmLifecycleManager: Active -> Acknowledged -> Resolved.

Allowed forward moves: Active->Acknowledged, Active->Resolved,
Acknowledged->Resolved. Anything else (re-acknowledge, acknowledging a
resolved alarm, re-resolve) is let through with a warning unless
``strict`` is set, in which case InvalidTransitionError is raised and the
row is left untouched.
"""
from __future__ import annotations

import logging

from core.errors import InvalidTransitionError
from models import OPEN_STATUSES, Alarm, AlarmStatus, utcnow
from services.event_publisher import EventPublisher
from services.repository import GridRepository

logger = logging.getLogger("gridos.alarm_lifecycle")

FORWARD_TRANSITIONS = {
    (AlarmStatus.Active, AlarmStatus.Acknowledged),
    (AlarmStatus.Active, AlarmStatus.Resolved),
    (AlarmStatus.Acknowledged, AlarmStatus.Resolved),
}


class AlarmLifecycleManager:

    def __init__(
        self,
        repository: GridRepository,
        *,
        strict: bool = False,
        publisher: EventPublisher | None = None,
    ):
        self.repository = repository
        self.strict = strict
        self.publisher = publisher

    async def raise_alarm(self, alarm: Alarm) -> Alarm:
        """Store an externally reported alarm as a fresh Active alarm."""
        await self.repository.get_node(alarm.grid_node_id)
        alarm.status = AlarmStatus.Active
        alarm.raised_at = utcnow()
        created = await self.repository.create_alarm(alarm)
        logger.warning(
            "ALARM RAISED (external): node=%d code=%s severity=%s",
            created.grid_node_id, created.alarm_code, created.severity.value,
        )
        await self._publish(created)
        return created

    async def acknowledge(self, alarm_id: int, acknowledged_by: str) -> Alarm:
        alarm = await self.repository.get_alarm(alarm_id)
        self._check(alarm, AlarmStatus.Acknowledged)

        alarm.status = AlarmStatus.Acknowledged
        alarm.acknowledged_at = utcnow()
        alarm.acknowledged_by = acknowledged_by
        await self.repository.update_alarm(alarm)
        logger.info("Alarm %d acknowledged by %s", alarm_id, acknowledged_by)
        await self._publish(alarm)
        return alarm

    async def resolve(self, alarm_id: int, resolution: str) -> Alarm:
        alarm = await self.repository.get_alarm(alarm_id)
        self._check(alarm, AlarmStatus.Resolved)

        alarm.status = AlarmStatus.Resolved
        alarm.resolved_at = utcnow()
        alarm.resolution = resolution
        await self.repository.update_alarm(alarm)
        logger.info("Alarm %d resolved", alarm_id)
        await self._publish(alarm)
        return alarm

    async def list_active(self) -> list[Alarm]:
        return await self.repository.list_alarms(OPEN_STATUSES)

    async def _publish(self, alarm: Alarm) -> None:
        if self.publisher is not None:
            await self.publisher.publish_alarm(alarm)

    def _check(self, alarm: Alarm, target: AlarmStatus) -> None:
        if (alarm.status, target) in FORWARD_TRANSITIONS:
            return
        if self.strict:
            raise InvalidTransitionError(alarm.id, alarm.status.value, target.value)
        logger.warning(
            "Alarm %d: non-forward transition %s -> %s accepted",
            alarm.id, alarm.status.value, target.value,
        )
