"""Shared test fixtures: a scripted model gateway and stub weather tools."""

import threading
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from agent.registry import ToolRegistry
from llm.base_client import BaseLLMClient, LLMResponse, Message
from schemas.errors import LocationNotFoundError
from schemas.tools import ToolInvocationRequest, ToolParameter, ToolSpec
from schemas.weather import CurrentConditions, GeocodingResult, TemperatureUnit, WeatherData


PARIS = GeocodingResult(
    name="Paris",
    country="France",
    country_code="FR",
    admin1="Île-de-France",
    latitude=48.8566,
    longitude=2.3522,
    timezone="Europe/Paris",
)

PARIS_NOW = WeatherData(
    latitude=48.8566,
    longitude=2.3522,
    timezone="Europe/Paris",
    unit=TemperatureUnit.CELSIUS,
    current=CurrentConditions(
        time="2026-10-19T14:00",
        temperature=18.0,
        apparent_temperature=17.2,
        relative_humidity=61,
        wind_speed=12.0,
        weather_code=2,
        description="partly cloudy",
        is_day=True,
    ),
)


def text(content: str) -> LLMResponse:
    """A model response that answers in text."""
    return LLMResponse(content=content, finish_reason="stop")


def call(name: str, arguments: Optional[Dict[str, Any]] = None, call_id: Optional[str] = None) -> LLMResponse:
    """A model response requesting a single tool."""
    return LLMResponse(
        tool_calls=[ToolInvocationRequest(
            id=call_id or f"call_{name}",
            name=name,
            arguments=arguments or {}
        )],
        finish_reason="tool_calls",
    )


ScriptStep = Union[LLMResponse, Exception, Callable[[List[Message]], LLMResponse]]


class ScriptedLLMClient(BaseLLMClient):
    """
    Model gateway that replays a fixed script.

    Each step is an LLMResponse to return, an exception to raise, or a
    callable receiving the messages. Every call's messages are recorded.
    """

    def __init__(self, script: List[ScriptStep]):
        self.script = list(script)
        self.calls: List[List[Message]] = []
        self.tools_seen: List[Optional[List[Dict[str, Any]]]] = []
        self._lock = threading.Lock()

    def chat(self, messages, tools=None, temperature=0.2, max_tokens=1024) -> LLMResponse:
        with self._lock:
            self.calls.append(list(messages))
            self.tools_seen.append(tools)
            if not self.script:
                raise AssertionError("ScriptedLLMClient ran out of responses")
            step = self.script.pop(0)

        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(messages)
        return step

    def get_provider_name(self) -> str:
        return "scripted"

    def get_model_name(self) -> str:
        return "scripted-model"


class StubWeatherHandlers:
    """Handlers for the weather tool table that never touch the network."""

    def __init__(self):
        self.invocations: List[tuple] = []

    def get_coordinates(self, arguments):
        self.invocations.append(("getCoordinates", dict(arguments)))
        if arguments["cityName"].lower() != "paris":
            raise LocationNotFoundError(arguments["cityName"], arguments.get("countryCode"))
        return PARIS

    def get_current_weather(self, arguments):
        self.invocations.append(("getCurrentWeather", dict(arguments)))
        return PARIS_NOW

    def get_weather_forecast(self, arguments):
        self.invocations.append(("getWeatherForecast", dict(arguments)))
        return WeatherData(latitude=arguments["lat"], longitude=arguments["lon"])

    def handlers(self):
        return {
            "getCoordinates": self.get_coordinates,
            "getCurrentWeather": self.get_current_weather,
            "getWeatherForecast": self.get_weather_forecast,
        }


@pytest.fixture
def stub_handlers():
    return StubWeatherHandlers()


@pytest.fixture
def weather_registry(stub_handlers):
    """Registry built from the real schema table with stub handlers."""
    from config.settings import DEFAULT_TOOLS_CONFIG

    registry = ToolRegistry()
    registry.register_table(DEFAULT_TOOLS_CONFIG, stub_handlers.handlers())
    return registry


def make_spec(name: str, handler, parameters=None) -> ToolSpec:
    """Build a ToolSpec for ad-hoc registry tests."""
    return ToolSpec(
        name=name,
        description=f"{name} test tool",
        parameters=parameters or [ToolParameter(name="value", type="string")],
        handler=handler,
    )
