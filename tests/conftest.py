"""
Pytest configuration and fixtures for exporter tests.
"""
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from monitoring_exporter.api.main import create_app
from monitoring_exporter.config.settings import (
    AuthSettings,
    CollectionSettings,
    RateLimitSettings,
    Settings,
)
from monitoring_exporter.metrics.metric import SimpleMetric
from monitoring_exporter.metrics.registry import MetricRegistry

VALID_TOKEN = "team1-scrape-token"


class SpyProducer:
    """Producer recording every call; registers a fixed set of metrics."""

    def __init__(self, *metrics: SimpleMetric) -> None:
        self.metrics = metrics
        self.calls: List[MetricRegistry] = []

    def __call__(self, registry: MetricRegistry) -> None:
        self.calls.append(registry)
        for metric in self.metrics:
            registry.register(metric)

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def valid_token() -> str:
    return VALID_TOKEN


@pytest.fixture
def spy_producer() -> Callable[..., SpyProducer]:
    """Factory for spy producers registering the given metrics"""
    return SpyProducer


@pytest.fixture
def test_settings() -> Settings:
    """Settings with one configured tag and no rate limiting"""
    return Settings(
        environment="test",
        auth=AuthSettings(tag_tokens={"team1": VALID_TOKEN}),
        collection=CollectionSettings(timeout_seconds=None),
        rate_limit=RateLimitSettings(enabled=False),
    )


@pytest.fixture
def up_producer() -> SpyProducer:
    """Spy producer registering `up` = 1.0 without HELP/TYPE headers"""
    return SpyProducer(SimpleMetric("up", 1.0))


@pytest.fixture
def make_client(test_settings: Settings) -> Callable[..., TestClient]:
    """Build a test client around a fresh app with the given producers"""
    def _make_client(producers, settings: Settings = None, **kwargs) -> TestClient:
        app = create_app(settings=settings or test_settings, producers=producers, **kwargs)
        return TestClient(app)

    return _make_client
