"""Health endpoints: storage probe plus node/reading counts."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_monitoring
from services.monitoring import GridMonitoringService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(monitoring: GridMonitoringService = Depends(get_monitoring)):
    report = await monitoring.health()
    body = {
        "status": "Healthy" if report.storage_reachable else "Unhealthy",
        "checks": [
            {
                "name": "grid-monitoring",
                "status": "Healthy" if report.storage_reachable else "Unhealthy",
                "description": (
                    "Grid monitoring system is operational"
                    if report.storage_reachable
                    else "Grid monitoring system is unavailable"
                ),
                "data": {
                    "grid_nodes_count": report.grid_nodes_count,
                    "readings_count": report.readings_count,
                    "timestamp": report.timestamp.isoformat(),
                },
            }
        ],
    }
    return JSONResponse(body, status_code=200 if report.storage_reachable else 503)


@router.get("/live")
async def live():
    return {"status": "Healthy"}


@router.get("/ready")
async def ready(monitoring: GridMonitoringService = Depends(get_monitoring)):
    report = await monitoring.health()
    if not report.storage_reachable:
        return JSONResponse({"status": "Unhealthy"}, status_code=503)
    return {"status": "Healthy"}
