# rockwatch/schemas/sensor_reading.py
"""
Sensor reading payloads.
Missing, null and NaN fields read as 0. Values must be finite, non-negative
JSON numbers: a string such as "12", a negative value or an overflowing
literal such as 1e400 is rejected as malformed.
"""

import math
from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional

SENSOR_FIELDS = (
    "displacement", "strain", "pore_pressure", "rainfall",
    "temperature", "dem_slope", "crack_score",
)


class SensorReading(BaseModel):
    displacement: float = 0.0     # mm
    strain: float = 0.0           # µε
    pore_pressure: float = 0.0    # kPa
    rainfall: float = 0.0         # mm
    temperature: float = 0.0      # °C
    dem_slope: float = 0.0        # degrees
    crack_score: float = 0.0      # 0–10

    class Config:
        frozen = True
        from_attributes = True

    @field_validator(*SENSOR_FIELDS, mode="before")
    @classmethod
    def _numeric_or_zero(cls, value):
        if value is None:
            return 0.0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        try:
            value = float(value)
        except OverflowError:
            raise ValueError("must be a finite number")
        if math.isnan(value):
            return 0.0
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        if value < 0:
            raise ValueError("must be non-negative")
        return value


class PredictRequest(SensorReading):
    mine_id: Optional[str] = None


class SensorReadingRow(SensorReading):
    """One row of a bulk import (CSV upload converted to JSON by the dashboard)."""
    mine_id: str
    timestamp: Optional[datetime] = None
