# rockwatch/services/risk_pipeline.py
"""
Reading → score → thresholds → alert state → notification → audit.

The mine's tracked alert state is read from the gateway at the start of the
cycle and written back at the end (read-modify-write, last write wins).
Only a missing mine is fatal; every other gateway failure is logged and the
cycle carries on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rockwatch.exceptions import MineNotFoundError
from rockwatch.schemas.sensor_reading import SensorReading
from rockwatch.services.alert_state_tracker import (
    Notification, Transition, candidate_level, parse_level, transition,
)
from rockwatch.services.notification_channels import DeliveryOutcome
from rockwatch.services.notification_dispatcher import NotificationDispatcher
from rockwatch.services.notification_message import build_acknowledgement, build_alert_message
from rockwatch.services.persistence_gateway import AlertRecord
from rockwatch.services.risk_scorer import RiskAssessment, RiskScorer
from rockwatch.services.threshold_evaluator import ParameterAlert, ThresholdEvaluator
from rockwatch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    assessment: RiskAssessment
    parameter_alerts: list[ParameterAlert] = field(default_factory=list)
    transition: Optional[Transition] = None
    delivery: Optional[DeliveryOutcome] = None

    @property
    def alert_triggered(self) -> bool:
        return self.transition is not None and self.transition.notify


class RiskPipeline:
    def __init__(self, gateway, scorer: RiskScorer, evaluator: ThresholdEvaluator,
                 dispatcher: NotificationDispatcher):
        self.gateway = gateway
        self.scorer = scorer
        self.evaluator = evaluator
        self.dispatcher = dispatcher

    def assess(self, reading: SensorReading) -> PipelineResult:
        """Score a reading without touching any mine state."""
        return PipelineResult(
            assessment=self.scorer.score(reading),
            parameter_alerts=self.evaluator.evaluate(reading),
        )

    async def evaluate_reading(self, mine_id: str, reading: SensorReading,
                               email_to: Optional[str] = None,
                               timestamp: Optional[datetime] = None) -> PipelineResult:
        mine = self.gateway.get_entity(mine_id)
        if mine is None:
            raise MineNotFoundError(mine_id)
        name, location = mine.name, mine.location

        result = self.assess(reading)
        candidate = candidate_level(result.assessment, result.parameter_alerts)
        result.transition = transition(parse_level(mine.alert_level), candidate)
        logger.info(
            f"[RISK] {name}: p={result.assessment.probability:.3f} "
            f"level={result.assessment.level.value} params={len(result.parameter_alerts)} "
            f"state {result.transition.previous.value}→{result.transition.current.value}"
        )

        self._safely("store sensor reading", self.gateway.append_sensor_reading, mine_id, reading, timestamp)
        self._safely("update mine risk", self.gateway.update_entity_risk,
                     mine_id, result.assessment, result.transition.current)

        if result.transition.notification is Notification.ESCALATION:
            message = build_alert_message(
                mine_id, name, location, result.assessment.probability,
                result.transition.current, email_to=email_to, parameter_alerts=result.parameter_alerts,
            )
            self._safely("record alert", self.gateway.append_alert_record, AlertRecord(
                mine_id=mine_id,
                alert_level=result.transition.current.value,
                risk_probability=result.assessment.probability,
                message=f"{result.transition.current.value.capitalize()} Rockfall Risk Detected at "
                        f"{name} - Risk: {message.risk_percent}%",
            ))
            result.delivery = await self.dispatcher.dispatch(message)
        elif result.transition.notification is Notification.DE_ESCALATION:
            self._safely("resolve alerts", self.gateway.resolve_open_alerts, mine_id)
            message = build_acknowledgement(mine_id, name, location, result.assessment.probability)
            result.delivery = await self.dispatcher.acknowledge(message)

        return result

    def _safely(self, action: str, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            logger.error(f"[RISK] Failed to {action}: {e}", exc_info=True)
            return None
