"""Geocoding and weather data schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TemperatureUnit(str, Enum):
    """Temperature unit accepted by the weather tools."""
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def wind_speed_unit(self) -> str:
        return "mph" if self is TemperatureUnit.FAHRENHEIT else "kmh"

    @property
    def precipitation_unit(self) -> str:
        return "inch" if self is TemperatureUnit.FAHRENHEIT else "mm"


class GeocodingResult(BaseModel):
    """A resolved place."""
    name: str
    country: Optional[str] = None
    country_code: Optional[str] = None
    admin1: Optional[str] = Field(None, description="First-level region, e.g. state")
    latitude: float
    longitude: float
    timezone: Optional[str] = None


class CurrentConditions(BaseModel):
    """Current weather at a location."""
    time: Optional[str] = None
    temperature: float
    apparent_temperature: Optional[float] = None
    relative_humidity: Optional[int] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[int] = None
    weather_code: Optional[int] = None
    description: str = "unknown"
    is_day: Optional[bool] = None


class DailyForecast(BaseModel):
    """One forecast day."""
    date: str
    temperature_max: Optional[float] = None
    temperature_min: Optional[float] = None
    precipitation_sum: Optional[float] = None
    precipitation_probability: Optional[int] = None
    will_precipitate: bool = False
    wind_speed_max: Optional[float] = None
    weather_code: Optional[int] = None
    description: str = "unknown"


class WeatherData(BaseModel):
    """Current conditions and/or forecast for a coordinate pair."""
    latitude: float
    longitude: float
    timezone: Optional[str] = None
    unit: TemperatureUnit = TemperatureUnit.CELSIUS
    wind_speed_unit: str = "kmh"
    current: Optional[CurrentConditions] = None
    daily: List[DailyForecast] = Field(default_factory=list)
