"""Agent: tool registry, weather tools and the orchestration loop."""

from .registry import ToolRegistry, load_tool_specs
from .tools import WeatherTools, build_weather_registry
from .loop import AgentLoop, AgentResult, AgentState, AgentStep, FALLBACK_MESSAGES

__all__ = [
    "ToolRegistry",
    "load_tool_specs",
    "WeatherTools",
    "build_weather_registry",
    "AgentLoop",
    "AgentResult",
    "AgentState",
    "AgentStep",
    "FALLBACK_MESSAGES",
]
