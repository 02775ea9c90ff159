from fastapi import Depends, Request

from coin_api.core.context import AppContext
from coin_api.core.metrics import MetricsRegistry
from coin_api.services.flips import FlipService
from coin_api.services.health import HealthMonitor


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_registry(context: AppContext = Depends(get_context)) -> MetricsRegistry:
    return context.registry


def get_flip_service(context: AppContext = Depends(get_context)) -> FlipService:
    return context.flips


def get_health_monitor(context: AppContext = Depends(get_context)) -> HealthMonitor:
    return context.health
