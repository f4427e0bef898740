# rockwatch/models/sensor_data.py
"""
Sensor readings table — append-only audit of every reading received,
keyed by (mine_id, timestamp). Rows are never updated.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey
from rockwatch.database import Base


class SensorData(Base):
    __tablename__ = "sensor_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    mine_id = Column(String(36), ForeignKey("mines.id"), nullable=False, index=True)
    displacement = Column(Float, default=0.0)
    strain = Column(Float, default=0.0)
    pore_pressure = Column(Float, default=0.0)
    rainfall = Column(Float, default=0.0)
    temperature = Column(Float, default=0.0)
    dem_slope = Column(Float, default=0.0)
    crack_score = Column(Float, default=0.0)
    timestamp = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<SensorData {self.id} mine={self.mine_id} at={self.timestamp}>"
