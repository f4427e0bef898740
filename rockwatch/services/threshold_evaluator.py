# rockwatch/services/threshold_evaluator.py
"""
Per-parameter threshold checks.
Runs alongside the aggregate risk score: one field over its high threshold
forces a high-severity alert even when the blended probability is moderate.
"""

from dataclasses import dataclass
from typing import Optional

from rockwatch.constants import DEFAULT_THRESHOLDS
from rockwatch.schemas.sensor_reading import SensorReading
from rockwatch.services.risk_scorer import RiskLevel

# field → (display name, unit, high message, medium message)
PARAMETERS = {
    "displacement": ("Displacement", "mm",
                     "Critical ground displacement detected - Immediate evacuation required",
                     "Elevated ground displacement - Monitor closely"),
    "strain": ("Strain", "µε",
               "Critical strain levels detected - Structural failure risk",
               "Elevated strain levels - Inspect slope reinforcement"),
    "pore_pressure": ("Pore Pressure", "kPa",
                      "Dangerous pore pressure levels - Rock stability compromised",
                      "Rising pore pressure - Check drainage"),
    "rainfall": ("Rainfall", "mm",
                 "Extreme rainfall detected - Slope saturation likely",
                 "Heavy rainfall detected - Increased landslide risk"),
    "crack_score": ("Crack Score", "/10",
                    "Severe cracking detected - Imminent failure risk",
                    "Visible crack growth - Schedule inspection"),
}


@dataclass(frozen=True)
class ParameterAlert:
    parameter: str
    value: float
    unit: str
    threshold: float
    severity: RiskLevel      # medium | high
    message: str

    def to_dict(self) -> dict:
        return {
            "parameter": self.parameter,
            "value": self.value,
            "unit": self.unit,
            "threshold": self.threshold,
            "severity": self.severity.value,
            "message": self.message,
        }


class ThresholdEvaluator:
    def __init__(self, thresholds: Optional[dict] = None):
        self.thresholds = {**DEFAULT_THRESHOLDS, **(thresholds or {})}

    def evaluate(self, reading: SensorReading) -> list[ParameterAlert]:
        alerts = []
        for field_name, (label, unit, high_msg, medium_msg) in PARAMETERS.items():
            limits = self.thresholds[field_name]
            value = getattr(reading, field_name)
            if value > limits["high"]:
                alerts.append(ParameterAlert(label, value, unit, limits["high"], RiskLevel.HIGH, high_msg))
            elif value > limits["medium"]:
                alerts.append(ParameterAlert(label, value, unit, limits["medium"], RiskLevel.MEDIUM, medium_msg))
        return alerts
