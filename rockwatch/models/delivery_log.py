# rockwatch/models/delivery_log.py
"""
Delivery log — one row per notification attempt (SMS, each email provider).
Observability only; never read back into scoring.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from rockwatch.database import Base


class DeliveryLog(Base):
    __tablename__ = "delivery_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mine_id = Column(String(36), index=True)
    channel = Column(String(20), nullable=False)      # sms | email
    provider = Column(String(50), nullable=False)     # twilio | resend | sendgrid | webhook
    recipient = Column(String(200))
    success = Column(Boolean, nullable=False)
    error = Column(Text)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<DeliveryLog {self.id} {self.provider} success={self.success}>"
