from fastapi import APIRouter, Depends
from starlette.responses import Response

from coin_api.api import deps
from coin_api.api.responses import METRICS_TEXT
from coin_api.core.metrics import MetricsRegistry

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=Response, responses=METRICS_TEXT)
def metrics_endpoint(registry: MetricsRegistry = Depends(deps.get_registry)):
    return Response(content=registry.export_text(), media_type=registry.content_type)
