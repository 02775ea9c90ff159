from coin_api.schemas.common import HealthOut
from coin_api.schemas.flip import FlipError

BAD_REQUEST = {400: {"model": FlipError, "description": "Invalid number of times"}}
UNHEALTHY = {503: {"model": HealthOut, "description": "Service reports itself down"}}
METRICS_TEXT = {
    200: {
        "content": {"text/plain": {}},
        "description": "Prometheus text exposition",
    }
}
