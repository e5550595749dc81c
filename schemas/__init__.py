"""Pydantic schemas for the Weather Chat Assistant."""

from .errors import (
    ErrorKind,
    WeatherAssistantError,
    UnknownToolError,
    ToolValidationError,
    ToolExecutionError,
    LocationNotFoundError,
    GeocodingUnavailableError,
    WeatherUnavailableError,
    ModelUnavailableError,
    ToolLoopExceededError,
)
from .tools import ParameterType, ToolParameter, ToolSpec, ToolInvocationRequest, ToolResult
from .weather import TemperatureUnit, GeocodingResult, CurrentConditions, DailyForecast, WeatherData

__all__ = [
    "ErrorKind",
    "WeatherAssistantError",
    "UnknownToolError",
    "ToolValidationError",
    "ToolExecutionError",
    "LocationNotFoundError",
    "GeocodingUnavailableError",
    "WeatherUnavailableError",
    "ModelUnavailableError",
    "ToolLoopExceededError",
    "ParameterType",
    "ToolParameter",
    "ToolSpec",
    "ToolInvocationRequest",
    "ToolResult",
    "TemperatureUnit",
    "GeocodingResult",
    "CurrentConditions",
    "DailyForecast",
    "WeatherData",
]
