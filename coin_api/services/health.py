"""Up/Down health state mirrored into the ``application_health`` gauge."""
from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from coin_api.core.metrics import MetricsRegistry

APPLICATION_HEALTH = "application_health"

logger = logging.getLogger(__name__)


class HealthStatus(str, enum.Enum):
    up = "Up"
    down = "Down"

    @property
    def gauge_value(self) -> int:
        return 1 if self is HealthStatus.up else 0


@dataclass(frozen=True)
class HealthReport:
    status: HealthStatus
    timestamp: datetime


def always_healthy() -> bool:
    return True


class HealthMonitor:
    """Runs the ``is_healthy`` predicate and records the result in the gauge.

    The predicate is the hook for real checks (dependency pings and the like).
    A predicate that raises counts as unhealthy.
    """

    def __init__(
        self,
        registry: MetricsRegistry,
        is_healthy: Callable[[], bool] = always_healthy,
    ) -> None:
        self.registry = registry
        self.is_healthy = is_healthy
        self._status = HealthStatus.up

    @staticmethod
    def register_metrics(registry: MetricsRegistry) -> None:
        registry.register_gauge(
            APPLICATION_HEALTH, "Health of the application, 1 for up, 0 for down"
        )
        registry.set_gauge(APPLICATION_HEALTH, HealthStatus.up.gauge_value)

    @property
    def status(self) -> HealthStatus:
        return self._status

    def check(self) -> HealthReport:
        try:
            healthy = bool(self.is_healthy())
        except Exception:
            logger.exception("health predicate failed")
            healthy = False
        status = HealthStatus.up if healthy else HealthStatus.down
        if status is not self._status:
            logger.warning(
                "health changed",
                extra={"event": {"from": self._status.value, "to": status.value}},
            )
            self._status = status
        self.registry.set_gauge(APPLICATION_HEALTH, status.gauge_value)
        return HealthReport(status=status, timestamp=datetime.now(timezone.utc))
