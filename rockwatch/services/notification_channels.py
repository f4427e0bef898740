# rockwatch/services/notification_channels.py
"""
Notification channels: Twilio SMS, Resend, SendGrid and a generic webhook.

Every channel exposes the same coroutine, send(message) -> DeliveryOutcome,
and makes exactly one HTTP request with a bounded timeout. No retries here.
Missing credentials and non-2xx responses come back as failed outcomes;
transport errors are caught and reported the same way.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from rockwatch.services.notification_message import NotificationMessage
from rockwatch.services.risk_scorer import RiskLevel
from rockwatch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class DeliveryOutcome:
    provider: str
    channel: str              # sms | email
    success: bool
    error: Optional[str] = None
    mine_id: Optional[str] = None
    recipient: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


class NotificationChannel:
    name = "base"
    channel = "none"

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self.client = client

    async def send(self, message: NotificationMessage) -> DeliveryOutcome:
        raise NotImplementedError

    def recipient_for(self, message: NotificationMessage) -> Optional[str]:
        return None

    def _outcome(self, message: NotificationMessage, success: bool, error: Optional[str] = None) -> DeliveryOutcome:
        return DeliveryOutcome(
            provider=self.name,
            channel=self.channel,
            success=success,
            error=error,
            mine_id=message.mine_id,
            recipient=self.recipient_for(message),
        )

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, **kwargs)

    async def _deliver(self, message: NotificationMessage, url: str, **kwargs) -> DeliveryOutcome:
        try:
            response = await self._post(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[{self.name.upper()}] request failed: {e}")
            return self._outcome(message, False, f"{self.name} error: {e}")
        if response.is_success:
            logger.info(f"[{self.name.upper()}] delivered for mine {message.mine_id}")
            return self._outcome(message, True)
        logger.warning(f"[{self.name.upper()}] HTTP {response.status_code}: {response.text[:200]}")
        return self._outcome(message, False, f"{self.name} API error {response.status_code}: {response.text[:500]}")


# ── SMS ──────────────────────────────────────────────────────────────────────
class TwilioSmsChannel(NotificationChannel):
    name = "twilio"
    channel = "sms"
    API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

    def __init__(self, account_sid: Optional[str], auth_token: Optional[str],
                 from_number: str, to_number: str, **kwargs):
        super().__init__(**kwargs)
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.to_number = to_number

    def recipient_for(self, message: NotificationMessage) -> Optional[str]:
        return message.sms_to or self.to_number

    async def send(self, message: NotificationMessage) -> DeliveryOutcome:
        if not (self.account_sid and self.auth_token):
            return self._outcome(message, False, "Twilio credentials not configured")
        return await self._deliver(
            message,
            self.API_URL.format(sid=self.account_sid),
            auth=(self.account_sid, self.auth_token),
            data={"From": self.from_number, "To": self.recipient_for(message), "Body": message.text},
        )


# ── Email ────────────────────────────────────────────────────────────────────
class EmailChannel(NotificationChannel):
    channel = "email"

    def __init__(self, from_email: str, from_name: str, **kwargs):
        super().__init__(**kwargs)
        self.from_email = from_email
        self.from_name = from_name

    def recipient_for(self, message: NotificationMessage) -> Optional[str]:
        return message.email_to


class ResendEmailChannel(EmailChannel):
    name = "resend"
    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: Optional[str], **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    async def send(self, message: NotificationMessage) -> DeliveryOutcome:
        if not self.api_key:
            return self._outcome(message, False, "Resend API key not configured")
        payload = {
            "from": f"{self.from_name} <{self.from_email}>",
            "to": [message.email_to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        if message.priority is RiskLevel.CRITICAL:
            payload["headers"] = {"X-Priority": "1"}
        return await self._deliver(
            message, self.API_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=payload,
        )


class SendGridEmailChannel(EmailChannel):
    name = "sendgrid"
    API_URL = "https://api.sendgrid.com/v3/mail/send"

    def __init__(self, api_key: Optional[str], **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    async def send(self, message: NotificationMessage) -> DeliveryOutcome:
        if not self.api_key:
            return self._outcome(message, False, "SendGrid API key not configured")
        payload = {
            "personalizations": [{"to": [{"email": message.email_to}], "subject": message.subject}],
            "from": {"email": self.from_email, "name": self.from_name},
            "content": [
                {"type": "text/plain", "value": message.text},
                {"type": "text/html", "value": message.html},
            ],
        }
        if message.priority is RiskLevel.CRITICAL:
            payload["headers"] = {"X-Priority": "1"}
        return await self._deliver(
            message, self.API_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=payload,
        )


class WebhookEmailChannel(EmailChannel):
    """Last-resort relay: POSTs the message to an HTTP-to-SMTP bridge."""
    name = "webhook"

    def __init__(self, url: Optional[str], **kwargs):
        super().__init__(**kwargs)
        self.url = url

    async def send(self, message: NotificationMessage) -> DeliveryOutcome:
        if not self.url:
            return self._outcome(message, False, "Email webhook URL not configured")
        return await self._deliver(
            message, self.url,
            json={
                "to": message.email_to,
                "subject": message.subject,
                "html": message.html,
                "text": message.text,
                "priority": message.priority.value,
            },
        )
