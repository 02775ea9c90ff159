import os
import sys
from itertools import cycle
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENV", "test")

from coin_api.core.config import Settings
from coin_api.core.metrics import MetricsRegistry
from coin_api.main import create_app
from coin_api.services.coin import RandomOutcomeGenerator
from coin_api.services.flips import register_flip_metrics
from coin_api.services.health import HealthMonitor


@pytest.fixture
def scripted_generator():
    """Build generators that replay ``draws`` forever and always pick ``batch_size``."""

    def build(draws, batch_size=None) -> RandomOutcomeGenerator:
        source = cycle(draws)

        def randint(low, high):
            return low if batch_size is None else batch_size

        return RandomOutcomeGenerator(source=lambda: next(source), randint=randint)

    return build


@pytest.fixture
def settings():
    return Settings(env="test", collect_default_metrics=False)


@pytest.fixture
def registry():
    reg = MetricsRegistry(global_labels={"app": "coin-api"})
    register_flip_metrics(reg)
    HealthMonitor.register_metrics(reg)
    return reg


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def context(app):
    return app.state.context
