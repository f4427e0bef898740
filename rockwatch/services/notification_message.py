# rockwatch/services/notification_message.py
"""
Builds the provider-neutral message handed to every notification channel.
"""

import html
from dataclasses import dataclass, field
from typing import Iterable, Optional

from rockwatch.services.risk_scorer import RiskLevel, email_priority
from rockwatch.services.threshold_evaluator import ParameterAlert

RECOMMENDED_ACTIONS = {
    RiskLevel.CRITICAL: [
        "Immediately evacuate all personnel from the affected area",
        "Activate emergency response protocols",
        "Contact emergency services and local authorities",
    ],
    RiskLevel.HIGH: [
        "Evacuate personnel from high-risk areas",
        "Implement emergency protocols",
        "Contact safety supervisors immediately",
    ],
    RiskLevel.MEDIUM: [
        "Increase monitoring frequency",
        "Notify all personnel of increased risk",
        "Prepare for potential evacuation",
    ],
    RiskLevel.LOW: [
        "Continue regular monitoring",
        "Report any unusual conditions",
    ],
}


@dataclass
class NotificationMessage:
    mine_id: str
    mine_name: str
    location: str
    level: RiskLevel
    probability: float
    subject: str
    text: str
    html: str
    email_to: Optional[str] = None
    sms_to: Optional[str] = None
    parameter_alerts: list = field(default_factory=list)

    @property
    def priority(self) -> RiskLevel:
        return email_priority(self.probability)

    @property
    def risk_percent(self) -> int:
        return round(self.probability * 100)


def build_alert_message(
    mine_id: str,
    mine_name: str,
    location: str,
    probability: float,
    level: RiskLevel,
    email_to: Optional[str] = None,
    parameter_alerts: Iterable[ParameterAlert] = (),
) -> NotificationMessage:
    parameter_alerts = list(parameter_alerts)
    percent = round(probability * 100)
    priority = email_priority(probability)

    lines = [
        f"🚨 {level.value.upper()} ROCKFALL RISK ALERT 🚨",
        "",
        f"Mine: {mine_name}",
        f"Location: {location}",
        f"Risk Level: {percent}%",
    ]
    if parameter_alerts:
        lines.append("")
        lines.extend(f"- {a.parameter}: {a.value:g}{a.unit} (> {a.threshold:g}) {a.message}" for a in parameter_alerts)
    lines.append("")
    lines.append("Recommended actions:")
    lines.extend(f"- {action}" for action in RECOMMENDED_ACTIONS[priority])
    text = "\n".join(lines)

    body = "".join(f"<p>{html.escape(line)}</p>" for line in lines if line)
    return NotificationMessage(
        mine_id=mine_id,
        mine_name=mine_name,
        location=location,
        level=level,
        probability=probability,
        subject=f"📊 {priority.value.upper()} RISK: {mine_name} - {percent}% Rockfall Risk",
        text=text,
        html=f"<html><body>{body}</body></html>",
        email_to=email_to,
        parameter_alerts=parameter_alerts,
    )


def build_acknowledgement(mine_id: str, mine_name: str, location: str, probability: float) -> NotificationMessage:
    """Short all-clear sent when a mine drops back to low risk."""
    text = f"✅ {mine_name} ({location}) back to LOW rockfall risk ({round(probability * 100)}%)."
    return NotificationMessage(
        mine_id=mine_id,
        mine_name=mine_name,
        location=location,
        level=RiskLevel.LOW,
        probability=probability,
        subject=f"LOW RISK: {mine_name}",
        text=text,
        html=f"<html><body><p>{html.escape(text)}</p></body></html>",
    )
