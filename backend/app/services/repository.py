"""GridRepository: storage access for nodes, readings, alarms.

Every method opens its own short-lived session from the factory and commits
before returning, so callers never hold a session across awaits.
Constraint and range violations become ValidationError; other SQLAlchemy /
driver failures are re-raised as StorageUnavailableError.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Iterable

from sqlalchemy import and_, func, select, text, update
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import NotFoundError, StorageUnavailableError, ValidationError
from models import (
    Alarm,
    AlarmStatus,
    GridNode,
    MaintenanceEvent,
    NodeStatus,
    SensorReading,
)

logger = logging.getLogger("gridos.repository")


class GridRepository:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session:
                yield session
        except (IntegrityError, DataError) as exc:
            # unique/FK violation or numeric overflow
            logger.warning("Rejected write: %s", exc.orig)
            raise ValidationError(str(exc.orig)) from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Storage error: %s", exc)
            raise StorageUnavailableError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def ping(self) -> None:
        async with self._session() as session:
            await session.execute(text("SELECT 1"))

    # ------------------------------------------------------------------
    # Grid nodes
    # ------------------------------------------------------------------

    async def create_node(self, node: GridNode) -> GridNode:
        async with self._session() as session:
            session.add(node)
            await session.commit()
            await session.refresh(node)
        return node

    async def list_nodes(self) -> list[GridNode]:
        async with self._session() as session:
            result = await session.execute(select(GridNode).order_by(GridNode.id))
            return list(result.scalars().all())

    async def get_node(self, node_id: int) -> GridNode:
        async with self._session() as session:
            node = await session.get(GridNode, node_id)
        if node is None:
            raise NotFoundError("GridNode", node_id)
        return node

    async def list_online_nodes(self) -> list[GridNode]:
        async with self._session() as session:
            stmt = (
                select(GridNode)
                .where(GridNode.status == NodeStatus.Online)
                .order_by(GridNode.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_nodes(self) -> int:
        async with self._session() as session:
            result = await session.execute(select(func.count(GridNode.id)))
            return result.scalar_one()

    # ------------------------------------------------------------------
    # Sensor readings
    # ------------------------------------------------------------------

    async def create_reading(self, reading: SensorReading) -> SensorReading:
        async with self._session() as session:
            session.add(reading)
            await session.commit()
        return reading

    async def create_readings(self, readings: Iterable[SensorReading]) -> list[SensorReading]:
        """Insert a batch of readings in one transaction."""
        batch = list(readings)
        if not batch:
            return batch
        async with self._session() as session:
            session.add_all(batch)
            await session.commit()
        return batch

    async def list_readings(
        self,
        node_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> list[SensorReading]:
        """Readings for a node, newest first."""
        conditions = [SensorReading.grid_node_id == node_id]
        if start is not None:
            conditions.append(SensorReading.timestamp >= start)
        if end is not None:
            conditions.append(SensorReading.timestamp <= end)

        stmt = (
            select(SensorReading)
            .where(and_(*conditions))
            .order_by(SensorReading.timestamp.desc(), SensorReading.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_readings(self) -> int:
        async with self._session() as session:
            result = await session.execute(select(func.count(SensorReading.id)))
            return result.scalar_one()

    # ------------------------------------------------------------------
    # Alarms
    # ------------------------------------------------------------------

    async def create_alarm(self, alarm: Alarm) -> Alarm:
        async with self._session() as session:
            session.add(alarm)
            await session.commit()
        return alarm

    async def get_alarm(self, alarm_id: int) -> Alarm:
        async with self._session() as session:
            alarm = await session.get(Alarm, alarm_id)
        if alarm is None:
            raise NotFoundError("Alarm", alarm_id)
        return alarm

    async def update_alarm(self, alarm: Alarm) -> None:
        """Persist lifecycle fields of one alarm row."""
        stmt = (
            update(Alarm)
            .where(Alarm.id == alarm.id)
            .values(
                status=alarm.status,
                acknowledged_at=alarm.acknowledged_at,
                acknowledged_by=alarm.acknowledged_by,
                resolved_at=alarm.resolved_at,
                resolution=alarm.resolution,
            )
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount == 0:
            raise NotFoundError("Alarm", alarm.id)

    async def list_alarms(
        self,
        statuses: Iterable[AlarmStatus] | None = None,
        node_id: int | None = None,
    ) -> list[Alarm]:
        """Alarms filtered by status and/or node, most recently raised first."""
        stmt = select(Alarm)
        if statuses is not None:
            stmt = stmt.where(Alarm.status.in_(list(statuses)))
        if node_id is not None:
            stmt = stmt.where(Alarm.grid_node_id == node_id)
        stmt = stmt.order_by(Alarm.raised_at.desc(), Alarm.id.desc())

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Maintenance events
    # ------------------------------------------------------------------

    async def list_maintenance_events(self, node_id: int) -> list[MaintenanceEvent]:
        stmt = (
            select(MaintenanceEvent)
            .where(MaintenanceEvent.grid_node_id == node_id)
            .order_by(MaintenanceEvent.scheduled_date.desc())
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def create_maintenance_event(self, event: MaintenanceEvent) -> MaintenanceEvent:
        async with self._session() as session:
            session.add(event)
            await session.commit()
        return event
