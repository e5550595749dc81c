"""Tool registry: schema table, argument validation and dispatch."""

import logging
import math
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

import yaml
from pydantic import BaseModel

from schemas.errors import (
    ErrorKind,
    ToolExecutionError,
    ToolValidationError,
    UnknownToolError,
)
from schemas.tools import (
    ParameterType,
    ToolInvocationRequest,
    ToolParameter,
    ToolResult,
    ToolSpec,
)

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Any]


def load_tool_specs(path) -> List[ToolSpec]:
    """
    Load tool schemas (without handlers) from a YAML table.

    Args:
        path: Path to the YAML file with a top-level ``tools`` list

    Returns:
        ToolSpec objects in file order
    """
    with open(Path(path), "r") as f:
        table = yaml.safe_load(f) or {}

    specs = []
    for entry in table.get("tools", []):
        specs.append(ToolSpec(
            name=entry["name"],
            description=" ".join(str(entry.get("description", "")).split()),
            parameters=[ToolParameter(**param) for param in entry.get("parameters", [])]
        ))
    return specs


class ToolRegistry:
    """
    Holds the fixed set of tools the model may call.

    Dispatch never raises: unknown tools, bad arguments and handler
    failures all come back as a failed ToolResult the model can read.
    """

    def __init__(self):
        self._tools: Dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        """Register a tool spec bound to its handler."""
        if spec.handler is None:
            raise ValueError(f"Tool '{spec.name}' has no handler")
        if spec.name in self._tools:
            raise ValueError(f"Tool '{spec.name}' already registered")
        self._tools[spec.name] = spec
        logger.debug(f"Registered tool: {spec.name}")

    def register_table(self, path, handlers: Mapping[str, ToolHandler]) -> None:
        """
        Register every tool in a YAML schema table.

        Args:
            path: Path to the schema table
            handlers: Handler for each tool, keyed by tool name

        Raises:
            ValueError: If a table entry has no handler or a handler has no entry
        """
        specs = load_tool_specs(path)
        names = {spec.name for spec in specs}

        missing = sorted(names - set(handlers))
        if missing:
            raise ValueError(f"No handler for tool(s): {', '.join(missing)}")
        extra = sorted(set(handlers) - names)
        if extra:
            raise ValueError(f"Handler(s) without a schema entry: {', '.join(extra)}")

        for spec in specs:
            self.register(spec.model_copy(update={"handler": handlers[spec.name]}))

        logger.info(f"Registered {len(specs)} tools from {path}")

    def resolve(self, name: str) -> ToolSpec:
        """
        Find the spec for a tool name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec

    def validate(self, request: ToolInvocationRequest, spec: ToolSpec) -> Dict[str, Any]:
        """
        Check request arguments against the tool's parameter schema.

        Optional parameters passed as null are dropped. Integral floats
        are accepted for integer parameters.

        Returns:
            Normalized arguments, safe to hand to the handler

        Raises:
            ToolValidationError: Listing every problem found
        """
        problems = []
        arguments: Dict[str, Any] = {}

        for name in request.arguments:
            if spec.get_parameter(name) is None:
                problems.append(f"unknown parameter '{name}'")

        for param in spec.parameters:
            value = request.arguments.get(param.name)
            if value is None:
                if param.required:
                    problems.append(f"missing required parameter '{param.name}'")
                continue

            value, problem = self._check_value(param, value)
            if problem:
                problems.append(problem)
            else:
                arguments[param.name] = value

        if problems:
            raise ToolValidationError(spec.name, problems)
        return arguments

    @staticmethod
    def _check_value(param: ToolParameter, value: Any):
        """Return (normalized value, problem or None)."""
        if param.type == ParameterType.STRING:
            ok = isinstance(value, str)
        elif param.type == ParameterType.BOOLEAN:
            ok = isinstance(value, bool)
        elif param.type == ParameterType.INTEGER:
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)

        if not ok:
            return value, (
                f"parameter '{param.name}' must be of type {param.type.value}, "
                f"got {type(value).__name__}"
            )

        # NaN slips past range checks; json.loads accepts NaN and Infinity
        if param.type == ParameterType.NUMBER and not math.isfinite(value):
            return value, f"parameter '{param.name}' must be a finite number"

        if param.enum and value not in param.enum:
            return value, f"parameter '{param.name}' must be one of {', '.join(param.enum)}"
        if param.minimum is not None and value < param.minimum:
            return value, f"parameter '{param.name}' must be >= {param.minimum:g}"
        if param.maximum is not None and value > param.maximum:
            return value, f"parameter '{param.name}' must be <= {param.maximum:g}"

        return value, None

    def dispatch(self, request: ToolInvocationRequest) -> ToolResult:
        """
        Validate a tool call and run its handler.

        Args:
            request: Tool invocation requested by the model

        Returns:
            ToolResult; failures carry an error_kind instead of raising
        """
        try:
            spec = self.resolve(request.name)
            arguments = self.validate(request, spec)
        except (UnknownToolError, ToolValidationError) as e:
            logger.warning(f"Rejected tool call {request.name}: {e}")
            return ToolResult.failure(request, e.kind, str(e))

        try:
            output = spec.handler(arguments)
        except ToolExecutionError as e:
            logger.warning(f"Tool {request.name} failed: {e}")
            return ToolResult.failure(request, ErrorKind.TOOL_EXECUTION_FAILURE, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool {request.name}")
            return ToolResult.failure(
                request,
                ErrorKind.TOOL_EXECUTION_FAILURE,
                f"{request.name} failed unexpectedly: {type(e).__name__}"
            )

        if isinstance(output, BaseModel):
            output = output.model_dump(mode="json")
        return ToolResult.ok(request, output)

    def get_definitions(self) -> List[Dict[str, Any]]:
        """OpenAI-compatible definitions for every registered tool."""
        return [spec.get_definition() for spec in self._tools.values()]

    def names(self) -> List[str]:
        """Return all registered tool names."""
        return list(self._tools.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
