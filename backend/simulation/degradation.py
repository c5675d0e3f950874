"""
Infrastructure Degradation Model
================================
Closed-form monthly wear, failure probability and risk classification.

The monthly condition loss is the product of five factors:
- Material base wear rate (annual rate / 12)
- Traffic amplification (piecewise linear in load)
- Environmental exposure (humidity, salinity, temperature)
- Maintenance status (months since service vs. recommended interval)
- Age relative to expected lifespan
"""

import math
from dataclasses import dataclass
from typing import Optional

from core.constants import (
    MONTHS_PER_YEAR,
    MAX_CONDITION,
    MAX_TRAFFIC_LOAD,
    TRAFFIC_LOW_LOAD,
    TRAFFIC_MEDIUM_LOAD,
    HUMIDITY_BASE,
    HUMIDITY_WEIGHT,
    SALINITY_BASE,
    SALINITY_WEIGHT,
    TEMPERATURE_BASE,
    TEMPERATURE_WEIGHT,
    ENVIRONMENTAL_MULTIPLIER_CAP,
    MAINTENANCE_OVERDUE_EXTRA_CAP,
    AGE_PAST_LIFESPAN_EXTRA_CAP,
    FAILURE_PROBABILITY_CAP,
    MAINTENANCE_OVERDUE_MONTHS,
    MAINTENANCE_SEVERELY_OVERDUE_MONTHS,
    MAINTENANCE_OVERDUE_MULTIPLIER,
    MAINTENANCE_SEVERELY_OVERDUE_MULTIPLIER,
    RISK_BANDS,
    RISK_LEVELS,
)
from core.errors import raise_validation_error
from .materials import get_base_wear_rate
from .models import AssetSnapshot


@dataclass(frozen=True)
class DegradationFactors:
    """Individual multipliers behind a monthly degradation figure."""
    base_rate: float
    traffic_amp: float
    environmental_mult: float
    maintenance_factor: float
    age_factor: float


@dataclass(frozen=True)
class DegradationResult:
    """One month of condition loss for an asset."""
    monthly_degradation: float
    new_condition: float
    factors: DegradationFactors


def _require_number(field: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise_validation_error(field, "must be a finite number", value)
    return float(value)


def _require_range(field: str, value, low: float, high: Optional[float] = None) -> None:
    number = _require_number(field, value)
    if number < low or (high is not None and number > high):
        bound = f"between {low:g} and {high:g}" if high is not None else f"at least {low:g}"
        raise_validation_error(field, f"must be {bound}", value)


def _require_positive(field: str, value) -> None:
    if _require_number(field, value) <= 0:
        raise_validation_error(field, "must be greater than zero", value)


def validate_snapshot(snapshot: AssetSnapshot) -> None:
    """
    Reject malformed asset attributes.

    Raises:
        ValidationError: On negative loads or indices, non-positive lifespan
            or maintenance interval, or a condition outside 0-100.
    """
    if not isinstance(snapshot.material, str) or not snapshot.material.strip():
        raise_validation_error("material", "must be a non-empty string", snapshot.material)
    _require_range("age_years", snapshot.age_years, 0)
    _require_positive("expected_lifespan", snapshot.expected_lifespan)
    _require_range("traffic_load", snapshot.traffic_load, 0, MAX_TRAFFIC_LOAD)
    _require_range("humidity_index", snapshot.humidity_index, 0, 1)
    _require_range("salinity_index", snapshot.salinity_index, 0, 1)
    _require_range("temperature_index", snapshot.temperature_index, 0, 1)
    _require_positive("maintenance_interval_months", snapshot.maintenance_interval_months)
    _require_range("months_since_maintenance", snapshot.months_since_maintenance, 0)
    _require_range("condition_score", snapshot.condition_score, 0, MAX_CONDITION)
    _require_range("replacement_cost", snapshot.replacement_cost, 0)
    _require_range("degradation_score", snapshot.degradation_score, 0)


class DegradationModel:
    """
    Deterministic infrastructure degradation model.

    Stateless: every method is a pure function of its arguments, so one
    instance can be shared by any number of concurrent runs.
    """

    def traffic_amplification(self, traffic_load: float) -> float:
        """Map a 0-100 traffic load to a 1.0-3.0 wear multiplier."""
        if traffic_load <= TRAFFIC_LOW_LOAD:
            return 1.0 + (traffic_load / TRAFFIC_LOW_LOAD) * 0.3
        elif traffic_load <= TRAFFIC_MEDIUM_LOAD:
            span = TRAFFIC_MEDIUM_LOAD - TRAFFIC_LOW_LOAD
            return 1.3 + ((traffic_load - TRAFFIC_LOW_LOAD) / span) * 0.7
        else:
            span = MAX_TRAFFIC_LOAD - TRAFFIC_MEDIUM_LOAD
            return 2.0 + ((traffic_load - TRAFFIC_MEDIUM_LOAD) / span) * 1.0

    def environmental_multiplier(
        self,
        humidity_index: float,
        salinity_index: float,
        temperature_index: float
    ) -> float:
        """Compounded exposure multiplier, capped at 2.5."""
        humidity_factor = HUMIDITY_BASE + humidity_index * HUMIDITY_WEIGHT
        salinity_factor = SALINITY_BASE + salinity_index * SALINITY_WEIGHT
        temperature_factor = TEMPERATURE_BASE + temperature_index * TEMPERATURE_WEIGHT
        multiplier = humidity_factor * salinity_factor * temperature_factor
        return min(multiplier, ENVIRONMENTAL_MULTIPLIER_CAP)

    def maintenance_factor(
        self,
        maintenance_interval_months: float,
        months_since_maintenance: float
    ) -> float:
        """
        Wear adjustment for maintenance status.

        Up to date: 0.7-0.9. Overdue by up to one interval: 1.0-1.3.
        Further overdue: 1.3-2.0.
        """
        ratio = months_since_maintenance / maintenance_interval_months

        if ratio <= 1.0:
            return 0.7 + (1 - ratio) * 0.2
        elif ratio <= 2.0:
            return 1.0 + (ratio - 1) * 0.3
        else:
            return 1.3 + min((ratio - 2) * 0.2, MAINTENANCE_OVERDUE_EXTRA_CAP)

    def age_factor(self, age_years: float, expected_lifespan: float) -> float:
        """Older assets wear faster; 1.0 for young assets up to 2.0 past lifespan."""
        age_ratio = age_years / expected_lifespan

        if age_ratio < 0.5:
            return 1.0
        elif age_ratio < 0.75:
            return 1.0 + (age_ratio - 0.5) * 0.8
        elif age_ratio < 1.0:
            return 1.2 + (age_ratio - 0.75) * 1.6
        else:
            return 1.6 + min((age_ratio - 1) * 0.8, AGE_PAST_LIFESPAN_EXTRA_CAP)

    def monthly_degradation(
        self,
        snapshot: AssetSnapshot,
        months_since_maintenance: Optional[float] = None
    ) -> DegradationResult:
        """
        Compute one month of condition loss.

        Args:
            snapshot: Asset attributes for this step
            months_since_maintenance: Override for the snapshot's value,
                used by the runner as months elapse

        Returns:
            DegradationResult with the delta, new condition and factors

        Raises:
            ValidationError: If the snapshot is malformed
        """
        validate_snapshot(snapshot)
        if months_since_maintenance is None:
            months_since_maintenance = snapshot.months_since_maintenance
        else:
            _require_range("months_since_maintenance", months_since_maintenance, 0)

        base_rate = get_base_wear_rate(snapshot.material) / MONTHS_PER_YEAR
        factors = DegradationFactors(
            base_rate=base_rate,
            traffic_amp=self.traffic_amplification(snapshot.traffic_load),
            environmental_mult=self.environmental_multiplier(
                snapshot.humidity_index,
                snapshot.salinity_index,
                snapshot.temperature_index,
            ),
            maintenance_factor=self.maintenance_factor(
                snapshot.maintenance_interval_months, months_since_maintenance
            ),
            age_factor=self.age_factor(snapshot.age_years, snapshot.expected_lifespan),
        )

        delta = (
            factors.base_rate
            * factors.traffic_amp
            * factors.environmental_mult
            * factors.maintenance_factor
            * factors.age_factor
        )

        return DegradationResult(
            monthly_degradation=delta,
            new_condition=max(0.0, snapshot.condition_score - delta),
            factors=factors,
        )

    def failure_probability(
        self,
        condition_score: float,
        annualized_degradation_rate: float,
        months_since_maintenance: float
    ) -> float:
        """Probability of failure (0-0.99) from condition, wear rate and maintenance lag."""
        _require_range("condition_score", condition_score, 0, MAX_CONDITION)
        _require_range("annualized_degradation_rate", annualized_degradation_rate, 0)
        _require_range("months_since_maintenance", months_since_maintenance, 0)

        c = condition_score
        if c >= 80:
            probability = 0.001
        elif c >= 60:
            probability = 0.01 + (80 - c) * 0.002
        elif c >= 40:
            probability = 0.05 + (60 - c) * 0.005
        elif c >= 20:
            probability = 0.15 + (40 - c) * 0.015
        else:
            probability = 0.45 + (20 - c) * 0.025

        # Faster wear raises risk
        if annualized_degradation_rate > 1:
            probability *= 1 + (annualized_degradation_rate - 1) * 0.5

        if months_since_maintenance > MAINTENANCE_SEVERELY_OVERDUE_MONTHS:
            probability *= MAINTENANCE_SEVERELY_OVERDUE_MULTIPLIER
        elif months_since_maintenance > MAINTENANCE_OVERDUE_MONTHS:
            probability *= MAINTENANCE_OVERDUE_MULTIPLIER

        return min(probability, FAILURE_PROBABILITY_CAP)

    def risk_level(self, condition_score: float, failure_probability: float) -> str:
        """Most severe band matched by either condition or probability."""
        for level, condition_below, probability_above in RISK_BANDS:
            if condition_score < condition_below or failure_probability > probability_above:
                return level
        return RISK_LEVELS[0]


# Convenience functions using singleton
_degradation_model = None

def _get_model() -> DegradationModel:
    global _degradation_model
    if _degradation_model is None:
        _degradation_model = DegradationModel()
    return _degradation_model

def monthly_degradation(
    snapshot: AssetSnapshot,
    months_since_maintenance: Optional[float] = None
) -> DegradationResult:
    """Convenience function to compute one month of degradation."""
    return _get_model().monthly_degradation(snapshot, months_since_maintenance)

def failure_probability(
    condition_score: float,
    annualized_degradation_rate: float,
    months_since_maintenance: float
) -> float:
    """Convenience function to compute failure probability."""
    return _get_model().failure_probability(
        condition_score, annualized_degradation_rate, months_since_maintenance
    )

def risk_level(condition_score: float, failure_probability: float) -> str:
    """Convenience function to classify risk."""
    return _get_model().risk_level(condition_score, failure_probability)
