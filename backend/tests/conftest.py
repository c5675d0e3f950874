"""
Pytest fixtures for InfraSim backend tests.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport

# Ensure backend is in path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before importing app
os.environ.setdefault("SIMULATION_STEP_DELAY_MS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

FIXED_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def asphalt_snapshot():
    """Asset matching the documented asphalt worked example."""
    from simulation.models import AssetSnapshot

    return AssetSnapshot(
        material="asphalt",
        age_years=2,
        expected_lifespan=20,
        traffic_load=50,
        humidity_index=0.6,
        salinity_index=0.7,
        temperature_index=0.7,
        maintenance_interval_months=12,
        months_since_maintenance=24,
        condition_score=90,
        replacement_cost=100000,
        asset_id="road-1",
        name="Main Street",
    )


@pytest.fixture
def registry():
    from realtime.registry import InMemoryRunRegistry

    return InMemoryRunRegistry()


@pytest.fixture
def broadcaster(registry):
    from realtime.broadcaster import ProgressBroadcaster

    return ProgressBroadcaster(registry)


@pytest.fixture
def runner(registry, broadcaster, fixed_clock):
    from simulation.runner import SimulationRunner

    return SimulationRunner(registry, broadcaster, clock=fixed_clock)


@pytest.fixture
def service(registry, broadcaster, runner, asphalt_snapshot):
    from simulation.service import SimulationService, StaticAssetProvider

    return SimulationService(
        registry=registry,
        broadcaster=broadcaster,
        runner=runner,
        asset_provider=StaticAssetProvider({"road-1": asphalt_snapshot}),
    )


@pytest.fixture
async def client(service):
    """Create an async test client wired to a fresh simulation service."""
    from main import app
    from simulation.service import get_simulation_service

    app.dependency_overrides[get_simulation_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
