# rockwatch/services/notification_dispatcher.py
"""
Multi-channel notification fan-out.

One best-effort SMS attempt, then email providers in priority order until one
succeeds. Every attempt is written to the delivery audit trail before
dispatch() returns. The dispatcher never deduplicates; edge-triggering in
the alert state tracker is the only dedup mechanism.
"""

from typing import Optional, Sequence

import httpx

from rockwatch.config import Settings
from rockwatch.services.notification_channels import (
    DeliveryOutcome,
    NotificationChannel,
    ResendEmailChannel,
    SendGridEmailChannel,
    TwilioSmsChannel,
    WebhookEmailChannel,
)
from rockwatch.services.notification_message import NotificationMessage
from rockwatch.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationDispatcher:
    def __init__(self, sms_channels: Sequence[NotificationChannel],
                 email_channels: Sequence[NotificationChannel], gateway=None):
        self.sms_channels = list(sms_channels)
        self.email_channels = list(email_channels)
        self.gateway = gateway

    async def dispatch(self, message: NotificationMessage) -> DeliveryOutcome:
        """
        Send an alert through SMS and the email fallback chain.
        Returns the first successful email outcome; if no email provider
        succeeds, a failed outcome carrying every provider's error.
        """
        last = None
        for channel in self.sms_channels:
            last = await self._attempt(channel, message)

        if not message.email_to:
            logger.info(f"[DISPATCH] No email recipient for mine {message.mine_id}, email skipped")
            return last or DeliveryOutcome(provider="none", channel="none", success=False,
                                           error="No notification channels configured",
                                           mine_id=message.mine_id)

        errors = []
        for channel in self.email_channels:
            outcome = await self._attempt(channel, message)
            if outcome.success:
                logger.info(f"[DISPATCH] Email sent via {outcome.provider} for mine {message.mine_id}")
                return outcome
            errors.append(f"{outcome.provider}: {outcome.error}")

        logger.error(f"[DISPATCH] All email providers failed for mine {message.mine_id}")
        return DeliveryOutcome(
            provider="email",
            channel="email",
            success=False,
            error="All email providers failed. " + "; ".join(errors),
            mine_id=message.mine_id,
            recipient=message.email_to,
        )

    async def acknowledge(self, message: NotificationMessage) -> Optional[DeliveryOutcome]:
        """Lightweight all-clear: a single attempt on the first configured channel."""
        channels = self.sms_channels or self.email_channels
        if not channels:
            return None
        return await self._attempt(channels[0], message)

    async def _attempt(self, channel: NotificationChannel, message: NotificationMessage) -> DeliveryOutcome:
        try:
            outcome = await channel.send(message)
        except Exception as e:
            logger.error(f"[DISPATCH] {channel.name} raised: {e}", exc_info=True)
            outcome = DeliveryOutcome(
                provider=channel.name,
                channel=channel.channel,
                success=False,
                error=str(e) or e.__class__.__name__,
                mine_id=message.mine_id,
                recipient=channel.recipient_for(message),
            )
        self._record(outcome)
        return outcome

    def _record(self, outcome: DeliveryOutcome):
        if self.gateway is None:
            return
        try:
            self.gateway.append_delivery_outcome(outcome)
        except Exception as e:
            logger.error(f"[DISPATCH] Failed to audit {outcome.provider} attempt: {e}")


def build_dispatcher(settings: Settings, gateway=None,
                     client: Optional[httpx.AsyncClient] = None) -> NotificationDispatcher:
    """Wire the production channel order from settings."""
    common = {"timeout": settings.PROVIDER_TIMEOUT_SECONDS, "client": client}
    email = {"from_email": settings.ALERT_EMAIL_FROM, "from_name": settings.ALERT_EMAIL_FROM_NAME, **common}
    return NotificationDispatcher(
        sms_channels=[
            TwilioSmsChannel(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN,
                             settings.TWILIO_FROM_NUMBER, settings.ALERT_SMS_TO, **common),
        ],
        email_channels=[
            ResendEmailChannel(settings.RESEND_API_KEY, **email),
            SendGridEmailChannel(settings.SENDGRID_API_KEY, **email),
            WebhookEmailChannel(settings.EMAIL_WEBHOOK_URL, **email),
        ],
        gateway=gateway,
    )
