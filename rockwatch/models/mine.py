# rockwatch/models/mine.py
"""
Mines table — one row per monitored site.
Static identity (name, location, coordinates) plus the mutable latest risk
state written by every evaluation cycle. alert_level is the last level that
was announced to operators and is the alert state tracker's persisted state.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Float
from rockwatch.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Mine(Base):
    __tablename__ = "mines"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    location = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    state = Column(String(100))
    mine_type = Column(String(100))
    current_risk_level = Column(String(20), nullable=False, default="low")
    current_risk_probability = Column(Float, nullable=False, default=0.0)
    alert_level = Column(String(20), nullable=False, default="low")
    last_updated = Column(DateTime)
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Mine {self.id} name={self.name} risk={self.current_risk_level}>"
