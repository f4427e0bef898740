# rockwatch/schemas/mine.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class MineOut(BaseModel):
    id: str
    name: str
    location: str
    latitude: float
    longitude: float
    state: Optional[str]
    mine_type: Optional[str]
    current_risk_level: str
    current_risk_probability: float
    alert_level: str
    last_updated: Optional[datetime]

    class Config:
        from_attributes = True
