"""Base LLM client interface."""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from pydantic import BaseModel

from schemas.tools import ToolInvocationRequest


class Message(BaseModel):
    """Chat message."""
    role: str  # "system", "user", "assistant", "tool"
    content: str
    tool_call_id: Optional[str] = None  # For tool responses
    tool_calls: Optional[List[ToolInvocationRequest]] = None  # For assistant messages with tool calls


class LLMResponse(BaseModel):
    """Response from LLM: final text, or tool invocation requests."""
    content: str = ""
    tool_calls: Optional[List[ToolInvocationRequest]] = None
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients (the model gateway)."""

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024
    ) -> LLMResponse:
        """
        Send chat completion request.

        Args:
            messages: List of messages in conversation
            tools: Optional list of tool definitions for function calling
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in response

        Returns:
            LLMResponse with content and optional tool calls

        Raises:
            ModelUnavailableError: If the provider call fails or its output is unusable
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of the LLM provider."""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Get the name of the model being used."""
        pass
