# rockwatch/services/risk_scorer.py
"""
Rockfall risk scorer.

Linear weighted sum over normalised sensor fields, sharpened with a power
law, plus a small uniform perturbation standing in for model uncertainty.
The perturbation comes from an injected random.Random so a seeded source
gives exact, repeatable scores.
"""

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rockwatch.config import Settings
from rockwatch.constants import DEFAULT_WEIGHTS, DEFAULT_CEILINGS
from rockwatch.schemas.sensor_reading import SensorReading


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"   # Four-level email priority only

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def for_alerting(self) -> "RiskLevel":
        """Alert state only tracks low/medium/high; critical folds into high."""
        return RiskLevel.HIGH if self is RiskLevel.CRITICAL else self


_SEVERITY = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2, RiskLevel.CRITICAL: 3}

SHARPENING_EXPONENT = 1.5

RECOMMENDATIONS = {
    RiskLevel.HIGH: "Immediate evacuation recommended. Implement emergency protocols and alert authorities.",
    RiskLevel.MEDIUM: "Enhanced monitoring required. Consider preventive measures and prepare evacuation plans.",
    RiskLevel.LOW: "Continue regular monitoring schedule. Maintain current safety protocols.",
}


@dataclass(frozen=True)
class RiskAssessment:
    probability: float
    level: RiskLevel
    confidence: float

    @property
    def recommendation(self) -> str:
        return RECOMMENDATIONS[self.level.for_alerting()]


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def confidence_for(probability: float) -> float:
    """
    Confidence grows with distance from the 0.5 midpoint.
    Floor 0.80 at the midpoint, 1.00 at either extreme before the bonus;
    near-certain predictions (<0.1 or >0.9) get +0.08. Capped at 0.99.
    """
    distance = abs(probability - 0.5)
    confidence = 0.80 + distance * 0.4
    if probability < 0.1 or probability > 0.9:
        confidence += 0.08
    return min(confidence, 0.99)


def email_priority(probability: float) -> RiskLevel:
    """Four-level priority used for email subjects and provider priority flags."""
    if probability >= 0.8:
        return RiskLevel.CRITICAL
    if probability >= 0.6:
        return RiskLevel.HIGH
    if probability >= 0.4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class RiskScorer:
    def __init__(
        self,
        weights: Optional[dict] = None,
        ceilings: Optional[dict] = None,
        high_threshold: float = 0.7,
        medium_threshold: float = 0.4,
        uncertainty: float = 0.05,
        rng: Optional[random.Random] = None,
    ):
        self.weights = dict(weights or DEFAULT_WEIGHTS)
        self.ceilings = dict(ceilings or DEFAULT_CEILINGS)
        self.high_threshold = high_threshold
        self.medium_threshold = medium_threshold
        self.uncertainty = uncertainty
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: Settings, rng: Optional[random.Random] = None) -> "RiskScorer":
        if rng is None:
            rng = random.Random(settings.RISK_RANDOM_SEED)
        return cls(
            weights=settings.FEATURE_WEIGHTS,
            ceilings=settings.FEATURE_CEILINGS,
            high_threshold=settings.RISK_HIGH_THRESHOLD,
            medium_threshold=settings.RISK_MEDIUM_THRESHOLD,
            uncertainty=settings.RISK_UNCERTAINTY,
            rng=rng,
        )

    def normalise(self, reading: SensorReading) -> dict:
        normalised = {}
        for name, ceiling in self.ceilings.items():
            value = getattr(reading, name, 0.0) or 0.0
            if math.isnan(value):
                value = 0.0
            normalised[name] = _clamp(value / ceiling) if ceiling else 0.0
        return normalised

    def weighted_score(self, reading: SensorReading) -> float:
        """Deterministic part of the score: sharpened weighted sum, no perturbation."""
        normalised = self.normalise(reading)
        total = sum(normalised.get(name, 0.0) * weight for name, weight in self.weights.items())
        return _clamp(total) ** SHARPENING_EXPONENT

    def classify(self, probability: float) -> RiskLevel:
        if probability >= self.high_threshold:
            return RiskLevel.HIGH
        if probability >= self.medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def score(self, reading: SensorReading) -> RiskAssessment:
        perturbation = (self.rng.random() - 0.5) * 2 * self.uncertainty
        probability = _clamp(self.weighted_score(reading) + perturbation)
        return RiskAssessment(
            probability=probability,
            level=self.classify(probability),
            confidence=confidence_for(probability),
        )
