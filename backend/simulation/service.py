"""
Simulation service facade: wires a registry, broadcaster and runner, and
schedules runs as background tasks.
"""

import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Union

from core.errors import AssetNotFoundError, RunNotFoundError, RunStateError
from core.logging import get_logger, log_audit
from realtime.broadcaster import ProgressBroadcaster
from realtime.registry import InMemoryRunRegistry, RunRegistry
from .models import AssetSnapshot, RunState, SimulationConfig, SimulationOutcome
from .runner import SimulationRunner

logger = get_logger(__name__)


class AssetProvider(ABC):
    """Persistence collaborator that resolves asset ids to snapshots."""

    @abstractmethod
    def get_asset(self, asset_id: str) -> Optional[AssetSnapshot]:
        """Return the asset's current snapshot, or None if unknown."""


class StaticAssetProvider(AssetProvider):
    """Serves snapshots from a fixed mapping."""

    def __init__(self, assets: Optional[Mapping[str, AssetSnapshot]] = None):
        self._assets = dict(assets or {})

    def get_asset(self, asset_id: str) -> Optional[AssetSnapshot]:
        return self._assets.get(asset_id)


class SimulationService:
    """Entry point for starting, awaiting, cancelling and inspecting runs."""

    def __init__(
        self,
        registry: Optional[RunRegistry] = None,
        broadcaster: Optional[ProgressBroadcaster] = None,
        runner: Optional[SimulationRunner] = None,
        asset_provider: Optional[AssetProvider] = None
    ):
        self.registry = registry or InMemoryRunRegistry()
        self.broadcaster = broadcaster or ProgressBroadcaster(self.registry)
        self.runner = runner or SimulationRunner(self.registry, self.broadcaster)
        self.asset_provider = asset_provider
        self._tasks: Dict[str, asyncio.Task] = {}

    def resolve_asset(self, asset: Union[AssetSnapshot, str]) -> AssetSnapshot:
        """
        Accept a snapshot as-is or look an asset id up via the provider.

        Raises:
            AssetNotFoundError: If the provider has no such asset
        """
        if isinstance(asset, AssetSnapshot):
            return asset
        snapshot = self.asset_provider.get_asset(asset) if self.asset_provider else None
        if snapshot is None:
            raise AssetNotFoundError(asset)
        return snapshot

    def start_run(
        self,
        asset: Union[AssetSnapshot, str],
        config: SimulationConfig,
        tenant_id: Optional[str] = None,
        run_id: Optional[str] = None
    ) -> str:
        """
        Validate and schedule a run on the running event loop.

        Asset lookup and validation errors are raised here, before the
        run is scheduled.

        Returns:
            The run id
        """
        snapshot = self.resolve_asset(asset)
        run_id = run_id or str(uuid.uuid4())
        self.runner.register(run_id, snapshot, config, tenant_id)

        task = asyncio.get_running_loop().create_task(
            self.runner.execute(run_id, snapshot, config),
            name=f"simulation:{run_id}",
        )
        self._tasks[run_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(run_id, None))
        logger.info(f"Scheduled run {run_id} ({config.years_to_simulate} years, {config.scenario_type})")
        return run_id

    async def wait(self, run_id: str) -> RunState:
        """Wait for a scheduled run to finish and return its final state."""
        task = self._tasks.get(run_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get_state(run_id)

    async def run(
        self,
        asset: Union[AssetSnapshot, str],
        config: SimulationConfig,
        tenant_id: Optional[str] = None,
        run_id: Optional[str] = None
    ) -> SimulationOutcome:
        """Run to completion in the caller's task and return the outcome."""
        snapshot = self.resolve_asset(asset)
        return await self.runner.run(run_id or str(uuid.uuid4()), snapshot, config, tenant_id)

    def cancel(self, run_id: str) -> RunState:
        """Request cooperative cancellation. Idempotent."""
        state = self.registry.request_cancel(run_id)
        log_audit("cancel", run_id, state.tenant_id)
        return state

    def get_state(self, run_id: str) -> RunState:
        state = self.registry.get(run_id)
        if state is None:
            raise RunNotFoundError(run_id)
        return state

    def list_runs(self, tenant_id: Optional[str] = None) -> List[RunState]:
        return self.registry.list_runs(tenant_id)

    def evict(self, run_id: str) -> None:
        """Drop a finished run's state."""
        state = self.get_state(run_id)
        if not state.is_terminal:
            raise RunStateError(
                message=f"Run {run_id} is still {state.status}; cancel it before evicting",
                details={"run_id": run_id, "status": state.status},
            )
        self.registry.evict(run_id)
        log_audit("evict", run_id, state.tenant_id)


# Singleton instance
simulation_service = SimulationService()


def get_simulation_service() -> SimulationService:
    return simulation_service
