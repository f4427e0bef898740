# rockwatch/services/alert_state_tracker.py
"""
Edge-triggered alert state per mine.

The tracked state is the last level announced for a mine (Mine.alert_level),
read from the persistence gateway at the start of each evaluation and written
back unconditionally afterwards. Rules:
  - candidate strictly more severe than tracked  → escalation notification
  - candidate low while tracked was not low      → de-escalation acknowledgement
  - anything else                                → silent
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from rockwatch.services.risk_scorer import RiskAssessment, RiskLevel
from rockwatch.services.threshold_evaluator import ParameterAlert


class Notification(str, Enum):
    NONE = "none"
    ESCALATION = "escalation"
    DE_ESCALATION = "de_escalation"


@dataclass(frozen=True)
class Transition:
    previous: RiskLevel
    current: RiskLevel
    notification: Notification

    @property
    def notify(self) -> bool:
        return self.notification is not Notification.NONE


def parse_level(value: Optional[str]) -> RiskLevel:
    """Persisted level → RiskLevel. Unknown or empty values read as low."""
    try:
        return RiskLevel(value).for_alerting()
    except ValueError:
        return RiskLevel.LOW


def candidate_level(assessment: RiskAssessment, parameter_alerts: Iterable[ParameterAlert]) -> RiskLevel:
    scored = assessment.level.for_alerting()
    if scored is RiskLevel.HIGH or any(a.severity is RiskLevel.HIGH for a in parameter_alerts):
        return RiskLevel.HIGH
    if scored is RiskLevel.MEDIUM:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def transition(tracked: RiskLevel, candidate: RiskLevel) -> Transition:
    tracked, candidate = tracked.for_alerting(), candidate.for_alerting()
    if candidate.severity > tracked.severity:
        kind = Notification.ESCALATION
    elif candidate is RiskLevel.LOW and tracked is not RiskLevel.LOW:
        kind = Notification.DE_ESCALATION
    else:
        kind = Notification.NONE
    return Transition(previous=tracked, current=candidate, notification=kind)


class AlertStateTracker:
    """Folds a stream of candidate levels for one mine into transitions."""

    def __init__(self, initial: RiskLevel = RiskLevel.LOW):
        self.state = initial.for_alerting()

    def observe(self, candidate: RiskLevel) -> Transition:
        result = transition(self.state, candidate)
        self.state = result.current
        return result
