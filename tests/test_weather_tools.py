"""Tests for WeatherTools handlers."""

import pytest
from unittest.mock import Mock
from agent.tools import WeatherTools, build_weather_registry
from config.settings import DEFAULT_TOOLS_CONFIG
from schemas.errors import ErrorKind, ToolExecutionError
from schemas.tools import ToolInvocationRequest
from schemas.weather import TemperatureUnit

from conftest import PARIS, PARIS_NOW


class TestWeatherTools:
    """Test handler argument handling with mocked clients."""

    def setup_method(self):
        """Set up test fixtures."""
        self.geocoding_client = Mock()
        self.geocoding_client.get_coordinates.return_value = PARIS
        self.weather_client = Mock()
        self.weather_client.get_current_weather.return_value = PARIS_NOW
        self.weather_client.get_forecast.return_value = PARIS_NOW
        self.tools = WeatherTools(self.geocoding_client, self.weather_client)

    def test_handlers_cover_the_table(self):
        """Test every tool in the table has a handler."""
        registry = build_weather_registry(self.tools, DEFAULT_TOOLS_CONFIG)
        assert sorted(registry.names()) == sorted(self.tools.handlers())

    def test_city_name_is_stripped(self):
        """Test surrounding whitespace is removed before lookup."""
        self.tools.get_coordinates({"cityName": "  Paris ", "countryCode": "FR"})

        self.geocoding_client.get_coordinates.assert_called_once_with("Paris", country_code="FR")

    def test_blank_city_name_rejected(self):
        """Test a blank city name fails without calling the geocoder."""
        with pytest.raises(ToolExecutionError, match="cityName must not be blank"):
            self.tools.get_coordinates({"cityName": "   "})

        self.geocoding_client.get_coordinates.assert_not_called()

    def test_blank_city_name_through_registry(self):
        """Test the blank-name failure is reported as a tool execution failure."""
        registry = build_weather_registry(self.tools, DEFAULT_TOOLS_CONFIG)

        result = registry.dispatch(ToolInvocationRequest(
            id="c1", name="getCoordinates", arguments={"cityName": " "}
        ))

        assert result.success is False
        assert result.error_kind == ErrorKind.TOOL_EXECUTION_FAILURE

    def test_unit_defaults_to_configured_unit(self):
        """Test the configured unit is used when none is passed."""
        tools = WeatherTools(self.geocoding_client, self.weather_client, default_unit=TemperatureUnit.FAHRENHEIT)

        tools.get_current_weather({"lat": 48.85, "lon": 2.35})

        self.weather_client.get_current_weather.assert_called_once_with(
            48.85, 2.35, unit=TemperatureUnit.FAHRENHEIT
        )

    def test_explicit_unit_wins(self):
        """Test a unit passed by the model overrides the default."""
        self.tools.get_weather_forecast({"lat": 48.85, "lon": 2.35, "days": 3, "unit": "fahrenheit"})

        self.weather_client.get_forecast.assert_called_once_with(
            48.85, 2.35, days=3, unit=TemperatureUnit.FAHRENHEIT
        )

    def test_default_unit_is_celsius(self):
        """Test celsius is the default without configuration."""
        self.tools.get_weather_forecast({"lat": 1.0, "lon": 2.0, "days": 1})

        assert self.weather_client.get_forecast.call_args[1]["unit"] == TemperatureUnit.CELSIUS
