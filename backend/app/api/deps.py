"""Request-scoped access to the services built in the lifespan."""
from fastapi import Request

from services.alarm_lifecycle import AlarmLifecycleManager
from services.monitoring import GridMonitoringService


def get_monitoring(request: Request) -> GridMonitoringService:
    return request.app.state.monitoring


def get_alarm_manager(request: Request) -> AlarmLifecycleManager:
    return request.app.state.alarm_manager
