"""Tests for ToolRegistry."""

import pytest
from agent.registry import ToolRegistry, load_tool_specs
from config.settings import DEFAULT_TOOLS_CONFIG
from schemas.errors import ErrorKind, ToolExecutionError, UnknownToolError
from schemas.tools import ToolInvocationRequest, ToolParameter

from conftest import PARIS, make_spec


def request(name, **arguments):
    return ToolInvocationRequest(id="call_1", name=name, arguments=arguments)


class TestToolSchemaTable:
    """Test the YAML schema table."""

    def test_table_declares_the_three_weather_tools(self):
        """Test tool and parameter names are exactly as published."""
        specs = {spec.name: spec for spec in load_tool_specs(DEFAULT_TOOLS_CONFIG)}

        assert set(specs) == {"getCoordinates", "getCurrentWeather", "getWeatherForecast"}
        assert [p.name for p in specs["getCoordinates"].parameters] == ["cityName", "countryCode"]
        assert [p.name for p in specs["getCurrentWeather"].parameters] == ["lat", "lon", "unit"]
        assert [p.name for p in specs["getWeatherForecast"].parameters] == ["lat", "lon", "days", "unit"]

    def test_required_flags(self):
        """Test optional parameters are marked optional."""
        specs = {spec.name: spec for spec in load_tool_specs(DEFAULT_TOOLS_CONFIG)}

        assert specs["getCoordinates"].get_parameter("cityName").required is True
        assert specs["getCoordinates"].get_parameter("countryCode").required is False
        assert specs["getWeatherForecast"].get_parameter("days").required is True
        assert specs["getWeatherForecast"].get_parameter("unit").required is False

    def test_definitions_are_openai_functions(self, weather_registry):
        """Test definitions carry JSON-schema parameters."""
        definitions = {d["function"]["name"]: d for d in weather_registry.get_definitions()}
        forecast = definitions["getWeatherForecast"]

        assert forecast["type"] == "function"
        params = forecast["function"]["parameters"]
        assert params["type"] == "object"
        assert params["required"] == ["lat", "lon", "days"]
        assert params["properties"]["days"]["type"] == "integer"
        assert params["properties"]["days"]["minimum"] == 1
        assert params["properties"]["days"]["maximum"] == 16
        assert params["properties"]["unit"]["enum"] == ["celsius", "fahrenheit"]

    def test_descriptions_are_single_line(self):
        """Test folded YAML descriptions collapse to plain text."""
        for spec in load_tool_specs(DEFAULT_TOOLS_CONFIG):
            assert "\n" not in spec.description
            assert spec.description


class TestToolRegistration:
    """Test registering tools."""

    def test_register_table_requires_every_handler(self, stub_handlers):
        """Test a table entry without a handler is rejected."""
        handlers = stub_handlers.handlers()
        del handlers["getWeatherForecast"]

        with pytest.raises(ValueError, match="getWeatherForecast"):
            ToolRegistry().register_table(DEFAULT_TOOLS_CONFIG, handlers)

    def test_register_table_rejects_extra_handlers(self, stub_handlers):
        """Test a handler with no table entry is rejected."""
        handlers = stub_handlers.handlers()
        handlers["getPollen"] = lambda arguments: None

        with pytest.raises(ValueError, match="getPollen"):
            ToolRegistry().register_table(DEFAULT_TOOLS_CONFIG, handlers)

    def test_duplicate_names_rejected(self):
        """Test a name can only be registered once."""
        registry = ToolRegistry()
        registry.register(make_spec("echo", lambda a: a))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(make_spec("echo", lambda a: a))

    def test_spec_without_handler_rejected(self):
        """Test specs must be bound before registration."""
        with pytest.raises(ValueError, match="no handler"):
            ToolRegistry().register(make_spec("echo", None))

    def test_resolve(self, weather_registry):
        """Test resolving known and unknown names."""
        assert weather_registry.resolve("getCoordinates").name == "getCoordinates"
        with pytest.raises(UnknownToolError):
            weather_registry.resolve("getPollen")
        assert "getCoordinates" in weather_registry
        assert len(weather_registry) == 3


class TestToolDispatch:
    """Test validation and dispatch."""

    def test_dispatch_success_serializes_models(self, weather_registry):
        """Test pydantic handler output becomes plain JSON data."""
        result = weather_registry.dispatch(request("getCoordinates", cityName="Paris"))

        assert result.success is True
        assert result.call_id == "call_1"
        assert result.result["latitude"] == PARIS.latitude
        assert result.to_payload()["ok"] is True

    def test_unknown_tool(self, weather_registry):
        """Test an unknown name becomes an UnknownTool result."""
        result = weather_registry.dispatch(request("getPollen", city="Paris"))

        assert result.success is False
        assert result.error_kind == ErrorKind.UNKNOWN_TOOL
        assert "getPollen" in result.error

    def test_missing_required_parameter_never_reaches_handler(self, weather_registry, stub_handlers):
        """Test validation failures do not invoke the handler."""
        result = weather_registry.dispatch(request("getCurrentWeather", lat=48.85))

        assert result.success is False
        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert "missing required parameter 'lon'" in result.error
        assert stub_handlers.invocations == []

    def test_reports_every_problem(self, weather_registry):
        """Test all problems are listed in one result."""
        result = weather_registry.dispatch(request(
            "getWeatherForecast", lat=100, lon="east", days=0, wind=True
        ))

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert "unknown parameter 'wind'" in result.error
        assert "'lat' must be <= 90" in result.error
        assert "'lon' must be of type number" in result.error
        assert "'days' must be >= 1" in result.error

    def test_enum_checked(self, weather_registry, stub_handlers):
        """Test enum parameters only accept listed values."""
        result = weather_registry.dispatch(request("getCurrentWeather", lat=1.0, lon=2.0, unit="kelvin"))

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert "celsius, fahrenheit" in result.error
        assert stub_handlers.invocations == []

    def test_bool_is_not_a_number(self, weather_registry):
        """Test booleans are rejected for numeric parameters."""
        result = weather_registry.dispatch(request("getCurrentWeather", lat=True, lon=2.0))
        assert result.error_kind == ErrorKind.VALIDATION_ERROR

    def test_non_finite_numbers_rejected(self, weather_registry, stub_handlers):
        """Test NaN and infinite coordinates never reach the handler."""
        for bad in (float("nan"), float("inf"), float("-inf")):
            result = weather_registry.dispatch(request("getCurrentWeather", lat=bad, lon=2.0))

            assert result.success is False
            assert result.error_kind == ErrorKind.VALIDATION_ERROR
            assert "parameter 'lat' must be a finite number" in result.error
        assert stub_handlers.invocations == []

    def test_nan_days_rejected(self, weather_registry, stub_handlers):
        """Test NaN is not accepted as an integer."""
        result = weather_registry.dispatch(request(
            "getWeatherForecast", lat=1.0, lon=2.0, days=float("nan")
        ))

        assert result.error_kind == ErrorKind.VALIDATION_ERROR
        assert stub_handlers.invocations == []

    def test_integral_float_accepted_for_integer(self, weather_registry, stub_handlers):
        """Test 3.0 is normalized to 3 for integer parameters."""
        result = weather_registry.dispatch(request("getWeatherForecast", lat=1.0, lon=2.0, days=3.0))

        assert result.success is True
        name, arguments = stub_handlers.invocations[-1]
        assert arguments["days"] == 3
        assert isinstance(arguments["days"], int)

    def test_null_optional_parameter_dropped(self, weather_registry, stub_handlers):
        """Test an optional parameter passed as null is omitted."""
        result = weather_registry.dispatch(request("getCoordinates", cityName="Paris", countryCode=None))

        assert result.success is True
        assert stub_handlers.invocations[-1] == ("getCoordinates", {"cityName": "Paris"})

    def test_tool_execution_error(self, weather_registry):
        """Test handler failures become ToolExecutionFailure results."""
        result = weather_registry.dispatch(request("getCoordinates", cityName="Atlantis"))

        assert result.success is False
        assert result.error_kind == ErrorKind.TOOL_EXECUTION_FAILURE
        assert result.error == "Location not found: Atlantis"

    def test_unexpected_handler_exception(self):
        """Test arbitrary handler exceptions are contained."""
        def broken(arguments):
            raise KeyError("boom")

        registry = ToolRegistry()
        registry.register(make_spec("broken", broken))
        result = registry.dispatch(request("broken", value="x"))

        assert result.success is False
        assert result.error_kind == ErrorKind.TOOL_EXECUTION_FAILURE
        assert result.error == "broken failed unexpectedly: KeyError"

    def test_typed_execution_error_message_kept(self):
        """Test ToolExecutionError messages pass through unchanged."""
        def failing(arguments):
            raise ToolExecutionError("service down")

        registry = ToolRegistry()
        registry.register(make_spec("failing", failing, [ToolParameter(name="value", type="string", required=False)]))
        result = registry.dispatch(request("failing"))

        assert result.error == "service down"
        assert result.to_payload() == {
            "ok": False,
            "error": {"kind": "tool_execution_failure", "message": "service down"},
        }
