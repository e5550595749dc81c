"""Memory data models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.tools import ToolInvocationRequest, ToolResult


class TurnRole(str, Enum):
    """Who produced a turn."""
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_RESULT = "tool-result"


class Turn(BaseModel):
    """A single turn in a conversation. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    role: TurnRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    # Set on tool-result turns only: the call that produced the result
    tool_call: Optional[ToolInvocationRequest] = None
    tool_result: Optional[ToolResult] = None

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(role=TurnRole.USER, content=text)

    @classmethod
    def assistant(cls, text: str) -> "Turn":
        return cls(role=TurnRole.ASSISTANT, content=text)

    @classmethod
    def from_tool_result(cls, request: ToolInvocationRequest, result: ToolResult) -> "Turn":
        return cls(
            role=TurnRole.TOOL_RESULT,
            content=result.to_content(),
            tool_call=request,
            tool_result=result,
        )


class Session(BaseModel):
    """A conversation thread and its bounded recent history."""
    session_id: str
    created_at: datetime = Field(default_factory=datetime.now)
    last_accessed: float = 0.0  # monotonic clock reading
    turns: List[Turn] = Field(default_factory=list)
    appended_count: int = 0  # includes turns already evicted from the window

    @property
    def turn_count(self) -> int:
        return len(self.turns)

    def is_expired(self, now: float, ttl_seconds: Optional[float]) -> bool:
        """Check if the session has been idle longer than the TTL."""
        if ttl_seconds is None:
            return False
        return now - self.last_accessed > ttl_seconds
