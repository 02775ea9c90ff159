from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from coin_api.core.config import Settings
from coin_api.core.metrics import MetricsRegistry, default_collectors
from coin_api.services.coin import RandomOutcomeGenerator
from coin_api.services.flips import FlipService, register_flip_metrics
from coin_api.services.health import HealthMonitor, always_healthy


@dataclass
class AppContext:
    """Process-wide state shared by every request handler."""

    settings: Settings
    registry: MetricsRegistry
    flips: FlipService
    health: HealthMonitor


def build_context(
    settings: Settings,
    generator: RandomOutcomeGenerator | None = None,
    is_healthy: Callable[[], bool] = always_healthy,
) -> AppContext:
    collectors = default_collectors() if settings.collect_default_metrics else []
    registry = MetricsRegistry(global_labels=settings.global_labels, collectors=collectors)
    register_flip_metrics(registry)
    HealthMonitor.register_metrics(registry)
    return AppContext(
        settings=settings,
        registry=registry,
        flips=FlipService(
            registry,
            generator=generator,
            random_min=settings.random_flip_min,
            random_max=settings.random_flip_max,
            max_times=settings.max_flip_times,
        ),
        health=HealthMonitor(registry, is_healthy=is_healthy),
    )
