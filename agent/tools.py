"""Weather tool handlers bound to the schema table in config/tools.yaml."""

import logging
from typing import Any, Dict

from schemas.errors import ToolExecutionError
from schemas.weather import GeocodingResult, TemperatureUnit, WeatherData
from services.geocoding_client import GeocodingClient
from services.weather_client import WeatherClient
from .registry import ToolHandler, ToolRegistry

logger = logging.getLogger(__name__)


class WeatherTools:
    """
    Handlers for the three weather tools.

    Each handler receives arguments already validated against the schema
    table, so required keys are present and typed. Downstream failures
    surface as ToolExecutionError subclasses.
    """

    def __init__(
        self,
        geocoding_client: GeocodingClient,
        weather_client: WeatherClient,
        default_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    ):
        """
        Initialize weather tools.

        Args:
            geocoding_client: Client for place lookups
            weather_client: Client for weather lookups
            default_unit: Unit used when the model does not pass one
        """
        self.geocoding_client = geocoding_client
        self.weather_client = weather_client
        self.default_unit = default_unit

    def handlers(self) -> Dict[str, ToolHandler]:
        """Handlers keyed by the tool names used in the schema table."""
        return {
            "getCoordinates": self.get_coordinates,
            "getCurrentWeather": self.get_current_weather,
            "getWeatherForecast": self.get_weather_forecast,
        }

    def get_coordinates(self, arguments: Dict[str, Any]) -> GeocodingResult:
        city_name = arguments["cityName"].strip()
        if not city_name:
            raise ToolExecutionError("cityName must not be blank")
        return self.geocoding_client.get_coordinates(
            city_name,
            country_code=arguments.get("countryCode")
        )

    def get_current_weather(self, arguments: Dict[str, Any]) -> WeatherData:
        return self.weather_client.get_current_weather(
            arguments["lat"],
            arguments["lon"],
            unit=self._unit(arguments)
        )

    def get_weather_forecast(self, arguments: Dict[str, Any]) -> WeatherData:
        return self.weather_client.get_forecast(
            arguments["lat"],
            arguments["lon"],
            days=arguments["days"],
            unit=self._unit(arguments)
        )

    def _unit(self, arguments: Dict[str, Any]) -> TemperatureUnit:
        unit = arguments.get("unit")
        return TemperatureUnit(unit) if unit else self.default_unit


def build_weather_registry(tools: WeatherTools, tools_config_path) -> ToolRegistry:
    """Create a registry holding the weather tools from the schema table."""
    registry = ToolRegistry()
    registry.register_table(tools_config_path, tools.handlers())
    return registry
