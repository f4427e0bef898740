# rockwatch/routers/weather.py
"""POST /fetch-weather-data — temperature and rainfall for a mine's coordinates."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rockwatch.dependencies import get_weather_service
from rockwatch.exceptions import WeatherServiceError
from rockwatch.schemas.weather import WeatherOut, WeatherRequest
from rockwatch.services.weather_service import WeatherService

router = APIRouter()


@router.post("/fetch-weather-data", response_model=WeatherOut, summary="Current weather at coordinates")
async def fetch_weather_data(body: WeatherRequest, weather: WeatherService = Depends(get_weather_service)):
    try:
        return await weather.fetch(body.latitude, body.longitude)
    except WeatherServiceError as e:
        return JSONResponse(status_code=e.status_code, content={"error": str(e), "details": e.details})
