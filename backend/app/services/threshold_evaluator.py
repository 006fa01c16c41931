"""ThresholdEvaluator: maps a freshly stored reading to zero or more alarms.

Rules are independent predicate -> alarm template pairs, checked in order
against the same reading. ``evaluate`` is pure; ``evaluate_and_raise``
persists what it produced. Repeated qualifying readings raise repeated
alarms (no dedup against unresolved alarms of the same code).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from config import settings
from models import Alarm, AlarmSeverity, AlarmStatus, SensorReading, utcnow
from services.repository import GridRepository

logger = logging.getLogger("gridos.threshold_evaluator")


@dataclass(frozen=True)
class AlarmRule:
    code: str
    severity: AlarmSeverity
    predicate: Callable[[SensorReading], bool]
    message: Callable[[SensorReading], str]


def temperature_high_rule(threshold: float) -> AlarmRule:
    return AlarmRule(
        code="TEMP_HIGH",
        severity=AlarmSeverity.High,
        predicate=lambda r: r.temperature > threshold,
        message=lambda r: f"High temperature detected: {r.temperature}°C",
    )


def default_rules() -> list[AlarmRule]:
    return [temperature_high_rule(settings.TEMP_HIGH_THRESHOLD)]


def evaluate(
    reading: SensorReading,
    rules: Sequence[AlarmRule],
    now: datetime,
) -> list[Alarm]:
    """Build (unsaved) alarms for every rule the reading trips."""
    return [
        Alarm(
            grid_node_id=reading.grid_node_id,
            alarm_code=rule.code,
            severity=rule.severity,
            message=rule.message(reading),
            status=AlarmStatus.Active,
            raised_at=now,
        )
        for rule in rules
        if rule.predicate(reading)
    ]


class ThresholdEvaluator:

    def __init__(
        self,
        repository: GridRepository,
        rules: Sequence[AlarmRule] | None = None,
    ):
        self.repository = repository
        self.rules = list(rules) if rules is not None else default_rules()

    async def evaluate_and_raise(self, reading: SensorReading) -> list[Alarm]:
        alarms = evaluate(reading, self.rules, utcnow())
        created: list[Alarm] = []
        for alarm in alarms:
            created.append(await self.repository.create_alarm(alarm))
            logger.warning(
                "ALARM RAISED: node=%d code=%s severity=%s",
                alarm.grid_node_id, alarm.alarm_code, alarm.severity.value,
            )
        return created
