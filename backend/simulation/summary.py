"""
Post-run summaries: failure window, cost impact and risk assessment.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from core.constants import (
    DAYS_PER_SIMULATED_MONTH,
    NEXT_INSPECTION_DAYS,
    RECOMMENDED_ACTIONS,
    REPAIR_COST_FRACTION,
    REPAIR_CONDITION_THRESHOLD,
)
from .models import (
    AssetSnapshot,
    MonthResult,
    FailureWindow,
    CostImpact,
    RiskAssessment,
    RunSummary,
)


def _month_to_date(month: int, now: datetime) -> datetime:
    return now + timedelta(days=month * DAYS_PER_SIMULATED_MONTH)


def calculate_failure_window(
    results: Sequence[MonthResult],
    now: datetime
) -> Optional[FailureWindow]:
    """Span from the first critical month to the last produced month, or None."""
    first_critical = next((r for r in results if r.risk_level == "critical"), None)
    if first_critical is None:
        return None

    return FailureWindow(
        start=_month_to_date(first_critical.month, now),
        end=_month_to_date(results[-1].month, now),
    )


def calculate_cost_impact(
    replacement_cost: float,
    results: Sequence[MonthResult]
) -> CostImpact:
    """Repair, replacement and first-year maintenance projected from a trajectory."""
    repair = (
        replacement_cost * REPAIR_COST_FRACTION
        if any(r.condition_score < REPAIR_CONDITION_THRESHOLD for r in results)
        else 0.0
    )
    replacement = (
        replacement_cost
        if any(r.condition_score <= 0 for r in results)
        else 0.0
    )
    first_year = sum(r.maintenance_cost for r in results if r.month <= 12)

    return CostImpact(
        estimated_repair_cost=repair,
        estimated_replacement_cost=replacement,
        projected_annual_maintenance=round(first_year, 2),
        total_projected_cost=round(repair + replacement + first_year, 2),
    )


def build_risk_assessment(
    snapshot: AssetSnapshot,
    results: Sequence[MonthResult],
    failure_window: Optional[FailureWindow],
    cost_impact: CostImpact,
    now: datetime
) -> Optional[RiskAssessment]:
    """Assessment for trajectories that reach critical risk; None otherwise."""
    if not any(r.risk_level == "critical" for r in results):
        return None

    first_condition = results[0].condition_score
    return RiskAssessment(
        overall_risk_score=round(100 - first_condition, 2),
        structural_risk=round(100 - first_condition * 0.6, 2),
        environmental_risk=round(snapshot.humidity_index * 100 + snapshot.salinity_index * 100, 2),
        operational_risk=snapshot.traffic_load,
        failure_window=failure_window,
        estimated_failure_cost=cost_impact.estimated_replacement_cost,
        recommended_actions=RECOMMENDED_ACTIONS,
        next_inspection_date=now + timedelta(days=NEXT_INSPECTION_DAYS),
    )


def summarize(
    snapshot: AssetSnapshot,
    results: Sequence[MonthResult],
    now: datetime
) -> RunSummary:
    """Derive the run summary once from a finished trajectory."""
    failure_window = calculate_failure_window(results, now)
    cost_impact = calculate_cost_impact(snapshot.replacement_cost, results)

    return RunSummary(
        failure_window=failure_window,
        cost_impact=cost_impact,
        total_months=len(results),
        final_condition=results[-1].condition_score if results else snapshot.condition_score,
        critical_months=sum(1 for r in results if r.risk_level == "critical"),
        risk_assessment=build_risk_assessment(
            snapshot, results, failure_window, cost_impact, now
        ),
    )
