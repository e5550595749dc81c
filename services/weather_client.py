"""Open-Meteo forecast client for current conditions and daily forecasts."""

import logging
from typing import Any, Dict, List, Optional

import requests

from schemas.errors import WeatherUnavailableError
from schemas.weather import CurrentConditions, DailyForecast, TemperatureUnit, WeatherData

logger = logging.getLogger(__name__)


# WMO weather interpretation codes as returned by Open-Meteo
WMO_CODE_DESCRIPTIONS: Dict[int, str] = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "depositing rime fog",
    51: "light drizzle",
    53: "moderate drizzle",
    55: "dense drizzle",
    56: "light freezing drizzle",
    57: "dense freezing drizzle",
    61: "slight rain",
    63: "moderate rain",
    65: "heavy rain",
    66: "light freezing rain",
    67: "heavy freezing rain",
    71: "slight snowfall",
    73: "moderate snowfall",
    75: "heavy snowfall",
    77: "snow grains",
    80: "slight rain showers",
    81: "moderate rain showers",
    82: "violent rain showers",
    85: "slight snow showers",
    86: "heavy snow showers",
    95: "thunderstorm",
    96: "thunderstorm with slight hail",
    99: "thunderstorm with heavy hail",
}

# Drizzle, rain, snow, showers and thunderstorms
PRECIPITATION_CODES = {code for code in WMO_CODE_DESCRIPTIONS if code >= 51}

CURRENT_VARIABLES = [
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "is_day",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
]

DAILY_VARIABLES = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
    "wind_speed_10m_max",
]


def describe_weather_code(code: Optional[int]) -> str:
    """Human-readable text for a WMO weather code."""
    if code is None:
        return "unknown"
    return WMO_CODE_DESCRIPTIONS.get(int(code), "unknown")


class WeatherClient:
    """Fetches weather from the Open-Meteo forecast API (no API key needed)."""

    DEFAULT_BASE_URL = "https://api.open-meteo.com/v1"
    MAX_FORECAST_DAYS = 16
    PRECIPITATION_PROBABILITY_THRESHOLD = 50

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10):
        """
        Initialize weather client.

        Args:
            base_url: Base URL of the forecast API
            timeout: Request timeout in seconds (default: 10)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._last_error: Optional[str] = None

    def _get_headers(self) -> dict:
        """Build request headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "Weather-Chat-Assistant/1.0"
        }

    def _fail(self, message: str) -> WeatherUnavailableError:
        self._last_error = message
        logger.warning(f"Weather API error: {message}")
        return WeatherUnavailableError(message)

    def get_current_weather(
        self,
        latitude: float,
        longitude: float,
        unit: TemperatureUnit = TemperatureUnit.CELSIUS
    ) -> WeatherData:
        """
        Get current conditions at a location.

        Raises:
            WeatherUnavailableError: If the API cannot be reached or answers badly
        """
        params = self._base_params(latitude, longitude, unit)
        params["current"] = ",".join(CURRENT_VARIABLES)

        data = self._fetch(params)
        current = data.get("current")
        if not isinstance(current, dict):
            raise self._fail("Response has no current conditions")

        weather = self._weather_data(data, latitude, longitude, unit)
        weather.current = self._parse_current(current)
        return weather

    def get_forecast(
        self,
        latitude: float,
        longitude: float,
        days: int,
        unit: TemperatureUnit = TemperatureUnit.CELSIUS
    ) -> WeatherData:
        """
        Get a daily forecast starting today.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            days: Number of days (1-16)
            unit: Temperature unit

        Raises:
            ValueError: If days is out of range
            WeatherUnavailableError: If the API cannot be reached or answers badly
        """
        if not 1 <= days <= self.MAX_FORECAST_DAYS:
            raise ValueError(f"days must be between 1 and {self.MAX_FORECAST_DAYS}")

        params = self._base_params(latitude, longitude, unit)
        params["daily"] = ",".join(DAILY_VARIABLES)
        params["forecast_days"] = days

        data = self._fetch(params)
        daily = data.get("daily")
        if not isinstance(daily, dict) or not daily.get("time"):
            raise self._fail("Response has no daily forecast")

        weather = self._weather_data(data, latitude, longitude, unit)
        weather.daily = self._parse_daily(daily)
        return weather

    def _base_params(self, latitude: float, longitude: float, unit: TemperatureUnit) -> Dict[str, Any]:
        return {
            "latitude": latitude,
            "longitude": longitude,
            "temperature_unit": unit.value,
            "wind_speed_unit": unit.wind_speed_unit,
            "precipitation_unit": unit.precipitation_unit,
            "timezone": "auto",
        }

    def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/forecast"
        try:
            response = requests.get(
                url,
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise self._fail(f"Request timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise self._fail(f"Request failed: {e}") from e

        if response.status_code != 200:
            raise self._fail(f"API returned status {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise self._fail("API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise self._fail(f"Unexpected API response format: {type(data).__name__}")

        self._last_error = None
        return data

    @staticmethod
    def _weather_data(
        data: Dict[str, Any],
        latitude: float,
        longitude: float,
        unit: TemperatureUnit
    ) -> WeatherData:
        return WeatherData(
            latitude=data.get("latitude", latitude),
            longitude=data.get("longitude", longitude),
            timezone=data.get("timezone"),
            unit=unit,
            wind_speed_unit=unit.wind_speed_unit,
        )

    def _parse_current(self, current: Dict[str, Any]) -> CurrentConditions:
        if current.get("temperature_2m") is None:
            raise self._fail("Current conditions missing temperature")

        code = current.get("weather_code")
        is_day = current.get("is_day")
        return CurrentConditions(
            time=current.get("time"),
            temperature=current["temperature_2m"],
            apparent_temperature=current.get("apparent_temperature"),
            relative_humidity=current.get("relative_humidity_2m"),
            wind_speed=current.get("wind_speed_10m"),
            wind_direction=current.get("wind_direction_10m"),
            weather_code=code,
            description=describe_weather_code(code),
            is_day=bool(is_day) if is_day is not None else None,
        )

    def _parse_daily(self, daily: Dict[str, Any]) -> List[DailyForecast]:
        dates = daily.get("time", [])

        def column(name: str) -> list:
            values = daily.get(name) or []
            return list(values) + [None] * (len(dates) - len(values))

        codes = column("weather_code")
        highs = column("temperature_2m_max")
        lows = column("temperature_2m_min")
        precip = column("precipitation_sum")
        precip_prob = column("precipitation_probability_max")
        wind = column("wind_speed_10m_max")

        forecasts = []
        for i, date in enumerate(dates):
            forecasts.append(DailyForecast(
                date=date,
                temperature_max=highs[i],
                temperature_min=lows[i],
                precipitation_sum=precip[i],
                precipitation_probability=precip_prob[i],
                will_precipitate=self._will_precipitate(codes[i], precip[i], precip_prob[i]),
                wind_speed_max=wind[i],
                weather_code=codes[i],
                description=describe_weather_code(codes[i]),
            ))
        return forecasts

    def _will_precipitate(
        self,
        code: Optional[int],
        precipitation_sum: Optional[float],
        probability: Optional[int]
    ) -> bool:
        if precipitation_sum is not None and precipitation_sum > 0:
            return True
        if probability is not None and probability >= self.PRECIPITATION_PROBABILITY_THRESHOLD:
            return True
        return code is not None and int(code) in PRECIPITATION_CODES

    def get_last_error(self) -> Optional[str]:
        """Get the last error message."""
        return self._last_error
