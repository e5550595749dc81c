"""Tool schema, invocation and result models."""

import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorKind


class ParameterType(str, Enum):
    """JSON-schema types a tool parameter may declare."""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class ToolParameter(BaseModel):
    """A single named parameter in a tool schema."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    description: str = ""
    required: bool = True
    enum: Optional[List[str]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_json_schema(self) -> Dict[str, Any]:
        """Render the parameter as a JSON-schema property."""
        schema: Dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
        }
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class ToolSpec(BaseModel):
    """A callable tool: its schema and the handler bound to it."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)
    handler: Optional[Callable[[Dict[str, Any]], Any]] = Field(default=None, exclude=True)

    def get_parameter(self, name: str) -> Optional[ToolParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def get_definition(self) -> Dict[str, Any]:
        """Get OpenAI-compatible tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        p.name: p.to_json_schema() for p in self.parameters
                    },
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }


class ToolInvocationRequest(BaseModel):
    """Tool call requested by the model."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Result from tool execution."""
    model_config = ConfigDict(frozen=True)

    tool_name: str
    call_id: Optional[str] = None
    success: bool
    result: Any = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, request: ToolInvocationRequest, result: Any) -> "ToolResult":
        return cls(tool_name=request.name, call_id=request.id, success=True, result=result)

    @classmethod
    def failure(
        cls,
        request: ToolInvocationRequest,
        error_kind: ErrorKind,
        error: str
    ) -> "ToolResult":
        return cls(
            tool_name=request.name,
            call_id=request.id,
            success=False,
            error=error,
            error_kind=error_kind,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Payload the model sees for this result."""
        if self.success:
            return {"ok": True, "data": self.result}
        return {
            "ok": False,
            "error": {
                "kind": self.error_kind.value if self.error_kind else None,
                "message": self.error,
            },
        }

    def to_content(self) -> str:
        return json.dumps(self.to_payload(), default=str)
