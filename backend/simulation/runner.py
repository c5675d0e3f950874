"""
Simulation Runner
=================
Drives the monthly degradation loop for one asset and configuration.

Lifecycle per run: pending -> running -> completed | cancelled | failed.
The runner is the only writer of a run's registry state. Progress is
announced after every step; cancellation is checked before every step.
"""

import asyncio
import dataclasses
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional

from core.config import SIMULATION_STEP_DELAY_MS
from core.constants import MONTHS_PER_YEAR, MIN_CONDITION, MAINTENANCE_COST_BANDS, CANCEL_REASON_USER
from core.errors import ValidationError
from core.logging import bind_run, get_logger, log_audit, log_error, log_timing
from realtime import events
from realtime.broadcaster import ProgressBroadcaster
from realtime.registry import RunRegistry
from .degradation import DegradationModel, validate_snapshot
from .models import AssetSnapshot, MonthResult, SimulationConfig, SimulationOutcome
from .scenarios import apply_scenario, scenario_multiplier, validate_config
from .summary import summarize

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def maintenance_cost(condition: float, replacement_cost: float) -> float:
    """Estimated maintenance spend for one month at a given condition."""
    for condition_below, fraction in MAINTENANCE_COST_BANDS:
        if condition < condition_below:
            return replacement_cost * fraction
    return 0.0


def progress_percent(step: int, total_steps: int) -> int:
    # Half-up rounding
    return int(math.floor(step / total_steps * 100 + 0.5))


class SimulationRunner:
    """
    Runs monthly degradation simulations against a run registry.

    Args:
        registry: Store of run lifecycle state
        broadcaster: Fan-out for progress and lifecycle events
        model: Degradation model (defaults to DegradationModel())
        clock: Source of "now" for summary dates
    """

    def __init__(
        self,
        registry: RunRegistry,
        broadcaster: ProgressBroadcaster,
        model: Optional[DegradationModel] = None,
        clock: Callable[[], datetime] = _utc_now
    ):
        self._registry = registry
        self._broadcaster = broadcaster
        self._model = model or DegradationModel()
        self._clock = clock

    def register(
        self,
        run_id: str,
        snapshot: AssetSnapshot,
        config: SimulationConfig,
        tenant_id: Optional[str] = None
    ) -> None:
        """
        Register a run as pending and validate its inputs.

        Raises:
            ValidationError: After marking the run failed with no results
            RunStateError: If the run id is already registered
        """
        self._registry.create(run_id, tenant_id=tenant_id, config=config)
        try:
            validate_snapshot(snapshot)
            validate_config(config)
        except ValidationError as e:
            self._registry.update(run_id, status="failed", error=e.message)
            self._broadcaster.announce(run_id, events.run_failed(run_id, e.message))
            logger.warning(f"Run {run_id} rejected: {e.message}")
            raise

    async def execute(
        self,
        run_id: str,
        snapshot: AssetSnapshot,
        config: SimulationConfig
    ) -> SimulationOutcome:
        """
        Run the monthly loop for a registered run.

        Unexpected errors in the loop or while finishing are not raised; the
        run ends 'failed' with its partial results kept.
        """
        state = self._registry.update(run_id, status="running")
        with bind_run(run_id, state.tenant_id):
            self._broadcaster.announce(run_id, events.run_started(run_id, config))
            log_audit("start", details={
                "asset_id": snapshot.asset_id,
                "years_to_simulate": config.years_to_simulate,
                "scenario_type": config.scenario_type,
            })

            results: List[MonthResult] = []
            try:
                with log_timing(f"simulation run {run_id}", logger):
                    status = await self._loop(run_id, snapshot, config, results)
                return self._finish(run_id, snapshot, status, results)
            except asyncio.CancelledError:
                # Task cancelled from outside: finish as a cancellation, then propagate
                self._finish(run_id, snapshot, "cancelled", results, reason="Run task cancelled")
                raise
            except Exception as e:
                return self._fail(run_id, results, e)

    async def run(
        self,
        run_id: str,
        snapshot: AssetSnapshot,
        config: SimulationConfig,
        tenant_id: Optional[str] = None
    ) -> SimulationOutcome:
        """Register, validate and execute a run to its terminal status."""
        self.register(run_id, snapshot, config, tenant_id)
        return await self.execute(run_id, snapshot, config)

    async def _loop(
        self,
        run_id: str,
        snapshot: AssetSnapshot,
        config: SimulationConfig,
        results: List[MonthResult]
    ) -> str:
        total_steps = config.total_steps
        multiplier = scenario_multiplier(config)
        adjusted = apply_scenario(snapshot, config)
        delay = (
            config.step_delay_seconds
            if config.step_delay_seconds is not None
            else SIMULATION_STEP_DELAY_MS / 1000
        )

        condition = snapshot.condition_score
        cumulative = snapshot.degradation_score

        for month in range(1, total_steps + 1):
            if self._registry.is_cancel_requested(run_id):
                logger.info(f"Run {run_id} cancelled before month {month}")
                return "cancelled"

            months_since = snapshot.months_since_maintenance + month
            step_snapshot = dataclasses.replace(
                adjusted,
                age_years=snapshot.age_years + month / MONTHS_PER_YEAR,
                condition_score=condition,
            )
            degradation = self._model.monthly_degradation(step_snapshot, months_since)
            delta = degradation.monthly_degradation * multiplier

            condition = max(MIN_CONDITION, condition - delta)
            cumulative += delta

            probability = self._model.failure_probability(
                condition, delta * MONTHS_PER_YEAR, months_since
            )
            result = MonthResult(
                month=month,
                year=math.ceil(month / MONTHS_PER_YEAR),
                condition_score=round(condition, 2),
                degradation_score=round(cumulative, 2),
                failure_probability=round(probability, 3),
                risk_level=self._model.risk_level(condition, probability),
                maintenance_cost=round(maintenance_cost(condition, snapshot.replacement_cost), 2),
            )
            results.append(result)

            progress = progress_percent(month, total_steps)
            self._registry.append_result(run_id, result)
            self._registry.update(run_id, progress=progress)
            self._broadcaster.announce(run_id, events.run_progress(run_id, month, progress))

            if result.condition_score <= 0:
                logger.info(f"Run {run_id}: asset failed at month {month}")
                break

            await asyncio.sleep(delay)

        return "completed"

    def _finish(
        self,
        run_id: str,
        snapshot: AssetSnapshot,
        status: str,
        results: List[MonthResult],
        reason: str = CANCEL_REASON_USER
    ) -> SimulationOutcome:
        summary = summarize(snapshot, results, self._clock())
        if status == "completed":
            state = self._registry.update(run_id, status="completed", progress=100)
            event = events.run_completed(run_id, state.completed_at)
        else:
            state = self._registry.update(run_id, status="cancelled", error=reason)
            event = events.run_cancelled(run_id, reason)
        self._broadcaster.announce(run_id, event)

        log_audit(status, run_id, state.tenant_id, {
            "months": len(results),
            "final_condition": summary.final_condition,
        })
        return SimulationOutcome(
            run_id=run_id,
            status=status,
            results=tuple(results),
            summary=summary,
        )

    def _fail(self, run_id: str, results: List[MonthResult], error: Exception) -> SimulationOutcome:
        message = str(error) or type(error).__name__
        log_error(f"Simulation run {run_id} failed", error, {"run_id": run_id, "months": len(results)})
        state = self._registry.update(run_id, status="failed", error=message)
        self._broadcaster.announce(run_id, events.run_failed(run_id, message))
        log_audit("fail", run_id, state.tenant_id, {"error": message})
        return SimulationOutcome(
            run_id=run_id,
            status="failed",
            results=tuple(results),
            error=message,
        )
