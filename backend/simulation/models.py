"""
Simulation Domain Records
=========================
Asset snapshots, run configuration, monthly results and run summaries.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

from core.constants import DEFAULT_SCENARIO_TYPE, MONTHS_PER_YEAR, TERMINAL_RUN_STATUSES


@dataclass(frozen=True)
class AssetSnapshot:
    """Point-in-time attributes of an asset, supplied by the caller."""
    material: str
    age_years: float
    expected_lifespan: float
    traffic_load: float  # 0-100
    humidity_index: float  # 0-1
    salinity_index: float  # 0-1
    temperature_index: float  # 0-1
    maintenance_interval_months: float
    months_since_maintenance: float
    condition_score: float  # 0-100
    replacement_cost: float = 0.0
    degradation_score: float = 0.0  # cumulative degradation before the run
    asset_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class CustomParams:
    """Caller-supplied multipliers for the custom scenario."""
    traffic_multiplier: Optional[float] = None
    maintenance_improvement: Optional[float] = None
    environmental_severity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trafficMultiplier": self.traffic_multiplier,
            "maintenanceImprovement": self.maintenance_improvement,
            "environmentalSeverity": self.environmental_severity,
        }


@dataclass(frozen=True)
class SimulationConfig:
    """How far and under which scenario to project an asset."""
    years_to_simulate: int
    scenario_type: str = DEFAULT_SCENARIO_TYPE
    custom_params: Optional[CustomParams] = None
    step_delay_seconds: Optional[float] = None  # demo toggle; None uses the configured default

    @property
    def total_steps(self) -> int:
        return self.years_to_simulate * MONTHS_PER_YEAR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "yearsToSimulate": self.years_to_simulate,
            "scenarioType": self.scenario_type,
            "customParams": self.custom_params.to_dict() if self.custom_params else None,
        }


@dataclass(frozen=True)
class MonthResult:
    """One month of projected state. Immutable once produced."""
    month: int
    year: int
    condition_score: float
    degradation_score: float
    failure_probability: float
    risk_level: str
    maintenance_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "conditionScore": self.condition_score,
            "degradationScore": self.degradation_score,
            "failureProbability": self.failure_probability,
            "riskLevel": self.risk_level,
            "maintenanceCost": self.maintenance_cost,
        }


@dataclass
class RunState:
    """Live lifecycle record of a run, owned by the run registry."""
    run_id: str
    status: str = "pending"
    progress: int = 0
    results: List[MonthResult] = field(default_factory=list)
    error: Optional[str] = None
    tenant_id: Optional[str] = None
    config: Optional[SimulationConfig] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancel_requested: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RUN_STATUSES

    def to_dict(self, include_results: bool = True) -> Dict[str, Any]:
        data = {
            "runId": self.run_id,
            "tenantId": self.tenant_id,
            "status": self.status,
            "progress": self.progress,
            "error": self.error,
            "config": self.config.to_dict() if self.config else None,
            "resultCount": len(self.results),
            "createdAt": _iso(self.created_at),
            "startedAt": _iso(self.started_at),
            "completedAt": _iso(self.completed_at),
            "cancelRequested": self.cancel_requested,
        }
        if include_results:
            data["results"] = [r.to_dict() for r in self.results]
        return data


@dataclass(frozen=True)
class FailureWindow:
    """Calendar span over which the asset is projected to be at critical risk."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class CostImpact:
    estimated_repair_cost: float
    estimated_replacement_cost: float
    projected_annual_maintenance: float
    total_projected_cost: float


@dataclass(frozen=True)
class RiskAssessment:
    """Assessment raised for runs that reach critical risk."""
    overall_risk_score: float
    structural_risk: float
    environmental_risk: float
    operational_risk: float
    failure_window: Optional[FailureWindow]
    estimated_failure_cost: float
    recommended_actions: Tuple[str, ...]
    next_inspection_date: datetime


@dataclass(frozen=True)
class RunSummary:
    """Post-run metrics derived once from a finished trajectory."""
    failure_window: Optional[FailureWindow]
    cost_impact: CostImpact
    total_months: int
    final_condition: float
    critical_months: int
    risk_assessment: Optional[RiskAssessment] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return _camelize(data)


@dataclass(frozen=True)
class SimulationOutcome:
    """Trajectory and summary handed back to the caller for persistence."""
    run_id: str
    status: str
    results: Tuple[MonthResult, ...]
    summary: Optional[RunSummary] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runId": self.run_id,
            "status": self.status,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict() if self.summary else None,
            "error": self.error,
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camelize(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value
