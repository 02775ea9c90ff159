from datetime import datetime

from pydantic import BaseModel

from coin_api.services.health import HealthStatus


class HealthOut(BaseModel):
    status: HealthStatus
    timestamp: datetime
