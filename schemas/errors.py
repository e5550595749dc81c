"""Error taxonomy for the weather assistant."""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Stable classification attached to failures."""
    UNKNOWN_TOOL = "unknown_tool"
    VALIDATION_ERROR = "validation_error"
    TOOL_EXECUTION_FAILURE = "tool_execution_failure"
    MODEL_UNAVAILABLE = "model_unavailable"
    TOOL_LOOP_EXCEEDED = "tool_loop_exceeded"


class WeatherAssistantError(Exception):
    """Base exception for all assistant errors."""

    kind: ErrorKind = ErrorKind.TOOL_EXECUTION_FAILURE


class UnknownToolError(WeatherAssistantError):
    """Raised when the model asks for a tool that is not registered."""

    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool '{tool_name}'")


class ToolValidationError(WeatherAssistantError):
    """Raised when tool arguments do not match the tool's parameter schema."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, tool_name: str, problems: List[str]):
        self.tool_name = tool_name
        self.problems = list(problems)
        super().__init__(
            f"Invalid arguments for {tool_name}: " + "; ".join(self.problems)
        )


class ToolExecutionError(WeatherAssistantError):
    """Raised by tool handlers when a downstream lookup fails."""

    kind = ErrorKind.TOOL_EXECUTION_FAILURE


class LocationNotFoundError(ToolExecutionError):
    """Geocoding found no place matching the query."""

    def __init__(self, city_name: str, country_code: Optional[str] = None):
        self.city_name = city_name
        self.country_code = country_code
        where = f"{city_name} ({country_code})" if country_code else city_name
        super().__init__(f"Location not found: {where}")


class GeocodingUnavailableError(ToolExecutionError):
    """The geocoding service could not be reached or answered badly."""


class WeatherUnavailableError(ToolExecutionError):
    """The weather service could not be reached or answered badly."""


class ModelUnavailableError(WeatherAssistantError):
    """The model gateway failed or returned output that cannot be used."""

    kind = ErrorKind.MODEL_UNAVAILABLE


class ToolLoopExceededError(WeatherAssistantError):
    """The model kept requesting tools past the round-trip bound."""

    kind = ErrorKind.TOOL_LOOP_EXCEEDED
