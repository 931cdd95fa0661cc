"""Pytest configuration for Vessel Telemetry tests.

Provides fixtures for:
1. Settings isolated from the developer's .env file
2. A store driven by a controllable clock
3. A TestClient bound to a freshly built application
"""

import pytest
from fastapi.testclient import TestClient

from vessel_telemetry.config import Settings
from vessel_telemetry.main import create_app
from vessel_telemetry.store import TelemetryStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    """Controllable millisecond clock."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Empty store stamping records with the fake clock."""
    return TelemetryStore(clock=clock)


@pytest.fixture
def settings():
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def app(settings):
    """Freshly built application with its own store."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient running the application lifespan (sweeper included)."""
    with TestClient(app) as test_client:
        yield test_client
