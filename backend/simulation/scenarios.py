"""
Scenario handling for simulation runs.
"""

import dataclasses

from core.constants import SCENARIO_TYPES, SCENARIO_MULTIPLIERS, MAX_TRAFFIC_LOAD
from core.errors import ValidationError, ErrorCode, raise_validation_error
from .models import AssetSnapshot, SimulationConfig


def validate_config(config: SimulationConfig) -> None:
    """
    Reject malformed simulation configuration.

    Raises:
        ValidationError: On a non-positive horizon, an unknown scenario,
            or a non-positive custom multiplier.
    """
    years = config.years_to_simulate
    if isinstance(years, bool) or not isinstance(years, int) or years < 1:
        raise_validation_error("years_to_simulate", "must be a positive integer", years)

    if config.scenario_type not in SCENARIO_TYPES:
        raise ValidationError(
            message=f"Unknown scenario type '{config.scenario_type}'. "
                    f"Allowed: {', '.join(sorted(SCENARIO_TYPES))}",
            code=ErrorCode.INVALID_CONFIG,
            details={"field": "scenario_type"},
        )

    params = config.custom_params
    if params is not None:
        for name in ("traffic_multiplier", "maintenance_improvement", "environmental_severity"):
            value = getattr(params, name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0
            ):
                raise_validation_error(name, "must be greater than zero", value)

    delay = config.step_delay_seconds
    if delay is not None and delay < 0:
        raise_validation_error("step_delay_seconds", "must not be negative", delay)


def scenario_multiplier(config: SimulationConfig) -> float:
    """Overall degradation multiplier for the configured scenario."""
    if config.scenario_type == "custom":
        params = config.custom_params
        if params is not None and params.environmental_severity is not None:
            return float(params.environmental_severity)
        return 1.0
    return SCENARIO_MULTIPLIERS[config.scenario_type]


def apply_scenario(snapshot: AssetSnapshot, config: SimulationConfig) -> AssetSnapshot:
    """
    Return the snapshot the model should see under this scenario.

    Traffic is pre-multiplied by the traffic multiplier and held to the
    model's 0-100 domain; the maintenance interval stretches by the
    maintenance improvement factor.
    """
    params = config.custom_params
    if params is None:
        return snapshot

    changes = {}
    if params.traffic_multiplier is not None:
        changes["traffic_load"] = min(
            snapshot.traffic_load * params.traffic_multiplier, MAX_TRAFFIC_LOAD
        )
    if params.maintenance_improvement is not None:
        changes["maintenance_interval_months"] = (
            snapshot.maintenance_interval_months * params.maintenance_improvement
        )
    return dataclasses.replace(snapshot, **changes) if changes else snapshot
