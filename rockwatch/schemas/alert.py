# rockwatch/schemas/alert.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class AlertOut(BaseModel):
    id: int
    mine_id: str
    alert_level: str
    risk_probability: float
    message: str
    is_resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime]

    class Config:
        from_attributes = True


class SendAlertRequest(BaseModel):
    mine_id: str = Field(..., min_length=1)
    mine_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    risk_probability: float = Field(..., ge=0, le=1)
    user_email: Optional[str] = None
    user_id: Optional[str] = None
