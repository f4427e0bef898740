"""Unit tests for per-parameter threshold checks."""

import pytest

from rockwatch.schemas.sensor_reading import SensorReading
from rockwatch.services.risk_scorer import RiskLevel
from rockwatch.services.threshold_evaluator import ThresholdEvaluator

HIGH_VALUES = {"displacement": 12.0, "strain": 400.0, "pore_pressure": 95.0, "rainfall": 70.0, "crack_score": 9.0}
MEDIUM_VALUES = {"displacement": 8.0, "strain": 300.0, "pore_pressure": 80.0, "rainfall": 50.0, "crack_score": 7.0}


@pytest.fixture
def evaluator():
    return ThresholdEvaluator()


class TestThresholdEvaluator:
    def test_quiet_reading_has_no_alerts(self, evaluator):
        assert evaluator.evaluate(SensorReading(displacement=2, strain=100, temperature=45, dem_slope=80)) == []

    @pytest.mark.parametrize("field_name", sorted(HIGH_VALUES))
    def test_single_field_over_high_threshold(self, evaluator, field_name):
        alerts = evaluator.evaluate(SensorReading(**{field_name: HIGH_VALUES[field_name]}))
        assert len(alerts) == 1
        assert alerts[0].severity is RiskLevel.HIGH
        assert alerts[0].value == HIGH_VALUES[field_name]

    @pytest.mark.parametrize("field_name", sorted(MEDIUM_VALUES))
    def test_single_field_between_medium_and_high(self, evaluator, field_name):
        alerts = evaluator.evaluate(SensorReading(**{field_name: MEDIUM_VALUES[field_name]}))
        assert len(alerts) == 1
        assert alerts[0].severity is RiskLevel.MEDIUM

    def test_value_at_high_threshold_is_only_medium(self, evaluator):
        alerts = evaluator.evaluate(SensorReading(displacement=10))
        assert [a.severity for a in alerts] == [RiskLevel.MEDIUM]
        assert alerts[0].threshold == 6

    def test_value_at_medium_threshold_is_quiet(self, evaluator):
        assert evaluator.evaluate(SensorReading(strain=250)) == []

    def test_alerts_follow_parameter_order(self, evaluator):
        alerts = evaluator.evaluate(SensorReading(crack_score=9, displacement=12, rainfall=45))
        assert [a.parameter for a in alerts] == ["Displacement", "Rainfall", "Crack Score"]
        assert [a.severity for a in alerts] == [RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.HIGH]

    def test_temperature_and_slope_have_no_thresholds(self, evaluator):
        assert evaluator.evaluate(SensorReading(temperature=60, dem_slope=89)) == []

    def test_override_thresholds(self):
        evaluator = ThresholdEvaluator({"displacement": {"low": 1, "medium": 2, "high": 4}})
        alerts = evaluator.evaluate(SensorReading(displacement=5, strain=400))
        assert [(a.parameter, a.severity) for a in alerts] == [
            ("Displacement", RiskLevel.HIGH), ("Strain", RiskLevel.HIGH),
        ]

    def test_to_dict(self, evaluator):
        alert = evaluator.evaluate(SensorReading(pore_pressure=95))[0]
        assert alert.to_dict() == {
            "parameter": "Pore Pressure",
            "value": 95.0,
            "unit": "kPa",
            "threshold": 90,
            "severity": "high",
            "message": "Dangerous pore pressure levels - Rock stability compromised",
        }
