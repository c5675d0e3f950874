"""
Simulation Module for InfraSim
==============================
Deterministic degradation model and the monthly run loop.
"""

from .models import (
    AssetSnapshot,
    CustomParams,
    SimulationConfig,
    MonthResult,
    RunState,
    FailureWindow,
    CostImpact,
    RiskAssessment,
    RunSummary,
    SimulationOutcome,
)

from .degradation import (
    DegradationModel,
    DegradationResult,
    DegradationFactors,
    validate_snapshot,
    monthly_degradation,
    failure_probability,
    risk_level,
)

from .materials import (
    MaterialProperties,
    MATERIAL_WEAR_RATES,
    get_material,
    list_materials,
)

__all__ = [
    # Models
    "AssetSnapshot",
    "CustomParams",
    "SimulationConfig",
    "MonthResult",
    "RunState",
    "FailureWindow",
    "CostImpact",
    "RiskAssessment",
    "RunSummary",
    "SimulationOutcome",
    # Degradation
    "DegradationModel",
    "DegradationResult",
    "DegradationFactors",
    "validate_snapshot",
    "monthly_degradation",
    "failure_probability",
    "risk_level",
    # Materials
    "MaterialProperties",
    "MATERIAL_WEAR_RATES",
    "get_material",
    "list_materials",
]
