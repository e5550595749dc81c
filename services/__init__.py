"""HTTP clients for the lookup services the tools call."""

from .geocoding_client import GeocodingClient
from .weather_client import WeatherClient, describe_weather_code

__all__ = ["GeocodingClient", "WeatherClient", "describe_weather_code"]
