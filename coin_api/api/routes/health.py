from fastapi import APIRouter, Depends, Response, status

from coin_api.api import deps
from coin_api.api.responses import UNHEALTHY
from coin_api.schemas.common import HealthOut
from coin_api.services.health import HealthMonitor, HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut, responses=UNHEALTHY)
def health(
    response: Response,
    monitor: HealthMonitor = Depends(deps.get_health_monitor),
):
    report = monitor.check()
    if report.status is HealthStatus.down:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthOut(status=report.status, timestamp=report.timestamp)
