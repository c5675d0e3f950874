"""
API Request/Response schemas with input validation.

All user-facing request models include:
- Range validation for numeric fields
- Enum validation for categorical fields
- Length constraints on identifiers
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Literal

from core.config import MAX_YEARS_TO_SIMULATE
from core.constants import DEFAULT_SCENARIO_TYPE, DEFAULT_YEARS_TO_SIMULATE
from simulation.models import AssetSnapshot, CustomParams, SimulationConfig

MAX_ID_LENGTH = 100


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase field names."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Simulation Schemas
# =============================================================================

class AssetSnapshotModel(CamelModel):
    """Asset attributes at simulation start."""
    asset_id: Optional[str] = Field(None, alias="assetId", max_length=MAX_ID_LENGTH)
    name: Optional[str] = Field(None, max_length=200)
    material: str = Field(..., min_length=1, max_length=50)
    age_years: float = Field(..., alias="ageYears", ge=0)
    expected_lifespan: float = Field(..., alias="expectedLifespan", gt=0)
    traffic_load: float = Field(..., alias="trafficLoad", ge=0, le=100)
    humidity_index: float = Field(..., alias="humidityIndex", ge=0, le=1)
    salinity_index: float = Field(..., alias="salinityIndex", ge=0, le=1)
    temperature_index: float = Field(..., alias="temperatureIndex", ge=0, le=1)
    maintenance_interval_months: float = Field(..., alias="maintenanceFreq", gt=0)
    months_since_maintenance: float = Field(..., alias="monthsSinceLastMaintenance", ge=0)
    condition_score: float = Field(..., alias="currentCondition", ge=0, le=100)
    replacement_cost: float = Field(0.0, alias="replacementCost", ge=0)
    degradation_score: float = Field(0.0, alias="degradationScore", ge=0)

    def to_domain(self) -> AssetSnapshot:
        return AssetSnapshot(**self.model_dump())


class CustomParamsModel(CamelModel):
    traffic_multiplier: Optional[float] = Field(None, alias="trafficMultiplier", gt=0)
    maintenance_improvement: Optional[float] = Field(None, alias="maintenanceImprovement", gt=0)
    environmental_severity: Optional[float] = Field(None, alias="environmentalSeverity", gt=0)


class SimulationConfigModel(CamelModel):
    years_to_simulate: int = Field(
        DEFAULT_YEARS_TO_SIMULATE,
        alias="yearsToSimulate",
        ge=1,
        le=MAX_YEARS_TO_SIMULATE,
        description="Horizon in years"
    )
    scenario_type: Literal["standard", "optimistic", "pessimistic", "custom"] = Field(
        DEFAULT_SCENARIO_TYPE,
        alias="scenarioType",
    )
    custom_params: Optional[CustomParamsModel] = Field(None, alias="customParams")
    step_delay_seconds: Optional[float] = Field(
        None,
        alias="stepDelaySeconds",
        ge=0,
        le=5,
        description="Demo pause between months"
    )

    def to_domain(self) -> SimulationConfig:
        params = self.custom_params
        return SimulationConfig(
            years_to_simulate=self.years_to_simulate,
            scenario_type=self.scenario_type,
            custom_params=CustomParams(**params.model_dump()) if params else None,
            step_delay_seconds=self.step_delay_seconds,
        )


class RunSimulationRequest(CamelModel):
    """Start a simulation for an inline asset snapshot or a known asset id."""
    asset: Optional[AssetSnapshotModel] = None
    asset_ref: Optional[str] = Field(None, alias="assetRef", max_length=MAX_ID_LENGTH)
    config: SimulationConfigModel = Field(default_factory=SimulationConfigModel)
    tenant_id: Optional[str] = Field(None, alias="tenantId", max_length=MAX_ID_LENGTH)
    run_id: Optional[str] = Field(
        None,
        alias="runId",
        max_length=MAX_ID_LENGTH,
        pattern=r"^[a-zA-Z0-9_-]+$",
    )


class RunStartedResponse(BaseModel):
    runId: str
    status: str


class MaterialResponse(BaseModel):
    material: str
    baseWearRate: float
    assetClass: str
    durabilityFactor: float
    costFactor: float
    description: str


class MaterialsResponse(BaseModel):
    materials: List[MaterialResponse]
