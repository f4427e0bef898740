# rockwatch/services/weather_service.py
"""
Current-conditions lookup from OpenWeatherMap.
Feeds the temperature and rainfall fields of a manual reading.
Endpoint: GET {WEATHER_API_URL}?lat=..&lon=..&appid=..&units=metric
"""

from typing import Optional

import httpx

from rockwatch.exceptions import WeatherServiceError
from rockwatch.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPERATURE_C = 25.0
RAINFALL_SCALE = 10          # 1h/3h precipitation → dashboard rainfall scale


class WeatherService:
    def __init__(self, api_key: Optional[str], api_url: str, timeout: float = 10.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.client = client

    async def _get(self, params: dict) -> httpx.Response:
        if self.client is not None:
            return await self.client.get(self.api_url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.api_url, params=params)

    async def fetch(self, latitude: float, longitude: float) -> dict:
        if not self.api_key:
            raise WeatherServiceError("Weather API key not configured", status_code=500)

        logger.info(f"[WEATHER] Fetching conditions for {latitude}, {longitude}")
        params = {"lat": latitude, "lon": longitude, "appid": self.api_key, "units": "metric"}
        try:
            response = await self._get(params)
        except httpx.HTTPError as e:
            logger.error(f"[WEATHER] Request failed: {e}")
            raise WeatherServiceError("Failed to fetch weather data", status_code=502, details=str(e)) from e

        if not response.is_success:
            logger.error(f"[WEATHER] API error {response.status_code}: {response.text[:200]}")
            raise WeatherServiceError("Failed to fetch weather data",
                                      status_code=response.status_code, details=response.text)

        data = response.json()
        temperature = (data.get("main") or {}).get("temp")
        rain = data.get("rain") or {}
        rainfall = rain.get("1h") or rain.get("3h") or 0
        return {
            "temperature": DEFAULT_TEMPERATURE_C if temperature is None else temperature,
            "rainfall": rainfall * RAINFALL_SCALE,
        }
