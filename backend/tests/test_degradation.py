"""
Tests for the degradation model: wear factors, failure probability and risk.
"""

import dataclasses
import itertools

import pytest

from core.constants import RISK_LEVELS
from core.errors import ValidationError, ErrorCode
from simulation.degradation import (
    DegradationModel,
    validate_snapshot,
    monthly_degradation,
    failure_probability,
    risk_level,
)


@pytest.fixture
def model():
    return DegradationModel()


class TestFactors:

    @pytest.mark.parametrize("load,expected", [
        (0, 1.0),
        (30, 1.3),
        (50, 1.65),
        (70, 2.0),
        (100, 3.0),
    ])
    def test_traffic_amplification(self, model, load, expected):
        assert model.traffic_amplification(load) == pytest.approx(expected)

    def test_environmental_multiplier(self, model):
        assert model.environmental_multiplier(0.6, 0.7, 0.7) == pytest.approx(2.457)
        assert model.environmental_multiplier(0, 0, 0) == pytest.approx(0.81)

    def test_environmental_multiplier_is_capped(self, model):
        """Worst-case exposure would be 3.78 uncapped."""
        assert model.environmental_multiplier(1, 1, 1) == pytest.approx(2.5)

    @pytest.mark.parametrize("since,expected", [
        (0, 0.9),
        (12, 0.7),
        (18, 1.15),
        (24, 1.3),
        (1200, 2.0),
    ])
    def test_maintenance_factor(self, model, since, expected):
        assert model.maintenance_factor(12, since) == pytest.approx(expected)

    @pytest.mark.parametrize("age,expected", [
        (2, 1.0),
        (12, 1.08),
        (16, 1.28),
        (20, 1.6),
        (60, 2.0),
    ])
    def test_age_factor(self, model, age, expected):
        assert model.age_factor(age, 20) == pytest.approx(expected)


class TestMonthlyDegradation:

    def test_worked_example(self, model, asphalt_snapshot):
        """Asphalt at load 50, humid coastal exposure, one interval overdue."""
        result = model.monthly_degradation(asphalt_snapshot)

        assert result.factors.base_rate == pytest.approx(2.5 / 12)
        assert result.factors.traffic_amp == pytest.approx(1.65)
        assert result.factors.environmental_mult == pytest.approx(2.457)
        assert result.factors.maintenance_factor == pytest.approx(1.3)
        assert result.factors.age_factor == pytest.approx(1.0)
        assert result.monthly_degradation == pytest.approx(1.098, abs=0.001)
        assert result.new_condition == pytest.approx(88.90, abs=0.01)

    def test_months_since_override(self, model, asphalt_snapshot):
        fresh = model.monthly_degradation(asphalt_snapshot, months_since_maintenance=0)
        assert fresh.factors.maintenance_factor == pytest.approx(0.9)
        assert fresh.monthly_degradation < model.monthly_degradation(asphalt_snapshot).monthly_degradation

    def test_unknown_material_uses_default_rate(self, model, asphalt_snapshot):
        unknown = dataclasses.replace(asphalt_snapshot, material="unobtainium")
        assert model.monthly_degradation(unknown).factors.base_rate == pytest.approx(2.0 / 12)

    def test_condition_never_below_zero(self, model, asphalt_snapshot):
        nearly_failed = dataclasses.replace(asphalt_snapshot, condition_score=0.5)
        assert model.monthly_degradation(nearly_failed).new_condition == 0.0

    def test_higher_traffic_wears_faster(self, model, asphalt_snapshot):
        previous = 0.0
        for load in (0, 20, 40, 60, 80, 100):
            delta = model.monthly_degradation(
                dataclasses.replace(asphalt_snapshot, traffic_load=load)
            ).monthly_degradation
            assert delta > previous
            previous = delta

    def test_wear_is_never_negative(self, model, asphalt_snapshot):
        grid = itertools.product(
            ("asphalt", "timber", "unlisted"),
            (0, 30, 70, 100),
            (0, 0.5, 1),
            (0, 10, 25, 60),
            (0, 12, 30, 48),
        )
        for material, traffic, index, age, since in grid:
            snapshot = dataclasses.replace(
                asphalt_snapshot,
                material=material,
                traffic_load=traffic,
                humidity_index=index,
                salinity_index=index,
                temperature_index=index,
                age_years=age,
            )
            assert model.monthly_degradation(snapshot, since).monthly_degradation >= 0

    def test_convenience_function(self, asphalt_snapshot):
        assert monthly_degradation(asphalt_snapshot).monthly_degradation == pytest.approx(1.098, abs=0.001)


class TestValidation:

    @pytest.mark.parametrize("field,value", [
        ("traffic_load", -1),
        ("traffic_load", 150),
        ("humidity_index", -0.1),
        ("salinity_index", 1.5),
        ("expected_lifespan", 0),
        ("maintenance_interval_months", 0),
        ("condition_score", 101),
        ("age_years", float("nan")),
        ("material", ""),
    ])
    def test_rejects_malformed_snapshot(self, asphalt_snapshot, field, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_snapshot(dataclasses.replace(asphalt_snapshot, **{field: value}))
        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert exc_info.value.details["field"] == field

    def test_model_validates_before_computing(self, model, asphalt_snapshot):
        with pytest.raises(ValidationError):
            model.monthly_degradation(dataclasses.replace(asphalt_snapshot, traffic_load=-5))

    def test_failure_probability_rejects_negative_rate(self, model):
        with pytest.raises(ValidationError):
            model.failure_probability(50, -1, 0)


class TestFailureProbability:

    @pytest.mark.parametrize("condition,expected", [
        (90, 0.001),
        (70, 0.03),
        (50, 0.1),
        (30, 0.3),
        (10, 0.7),
    ])
    def test_condition_bands(self, model, condition, expected):
        assert model.failure_probability(condition, 0.5, 0) == pytest.approx(expected)

    def test_fast_wear_raises_probability(self, model):
        assert model.failure_probability(50, 3, 0) == pytest.approx(0.2)

    def test_overdue_maintenance_multipliers(self, model):
        assert model.failure_probability(50, 0.5, 24) == pytest.approx(0.1)
        assert model.failure_probability(50, 0.5, 30) == pytest.approx(0.13)
        assert model.failure_probability(50, 0.5, 36) == pytest.approx(0.13)
        assert model.failure_probability(50, 0.5, 40) == pytest.approx(0.16)

    def test_capped(self, model):
        assert model.failure_probability(0, 10, 60) == pytest.approx(0.99)

    def test_monotone_in_condition(self, model):
        probabilities = [model.failure_probability(c, 2.0, 12) for c in range(100, -1, -5)]
        assert probabilities == sorted(probabilities)

    def test_convenience_function(self):
        assert failure_probability(90, 0.5, 0) == pytest.approx(0.001)


class TestRiskLevel:

    @pytest.mark.parametrize("condition,probability,expected", [
        (90, 0.05, "low"),
        (60, 0.1, "low"),
        (50, 0.05, "medium"),
        (90, 0.15, "medium"),
        (35, 0.05, "high"),
        (90, 0.25, "high"),
        (10, 0.0, "critical"),
        (90, 0.5, "critical"),
    ])
    def test_bands(self, model, condition, probability, expected):
        assert model.risk_level(condition, probability) == expected

    @pytest.mark.parametrize("probability", [0.0, 0.05, 0.1])
    def test_severity_never_rises_with_condition(self, model, probability):
        severities = [
            RISK_LEVELS.index(model.risk_level(condition, probability))
            for condition in range(0, 101)
        ]
        assert severities == sorted(severities, reverse=True)
        assert severities[0] == RISK_LEVELS.index("critical")
        assert severities[-1] == RISK_LEVELS.index("low")

    def test_convenience_function(self):
        assert risk_level(15, 0.0) == "critical"
