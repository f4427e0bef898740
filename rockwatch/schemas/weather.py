# rockwatch/schemas/weather.py
from pydantic import BaseModel, Field


class WeatherRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WeatherOut(BaseModel):
    temperature: float
    rainfall: float
