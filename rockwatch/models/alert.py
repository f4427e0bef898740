# rockwatch/models/alert.py
"""
Alerts table — one row per rising-edge risk alert (and per manual /send-alert).
Only is_resolved / resolved_at are ever mutated after insert.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Float, Boolean, ForeignKey
from rockwatch.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mine_id = Column(String(36), ForeignKey("mines.id"), nullable=False, index=True)
    alert_level = Column(String(20), nullable=False, index=True)
    risk_probability = Column(Float, nullable=False)
    message = Column(Text, nullable=False)
    is_resolved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Alert {self.id} mine={self.mine_id} level={self.alert_level} resolved={self.is_resolved}>"
