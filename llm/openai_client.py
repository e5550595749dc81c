"""OpenAI LLM client implementation."""

import os
import json
import logging
from typing import Optional, List, Dict, Any

from openai import OpenAI

from schemas.errors import ModelUnavailableError
from schemas.tools import ToolInvocationRequest
from .base_client import BaseLLMClient, Message, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """OpenAI GPT client implementation."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 2
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY env var)
            model: Model to use (default: gpt-4o-mini)
            timeout: Request timeout in seconds
            max_retries: Retries performed by the SDK before giving up
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = model or self.DEFAULT_MODEL
        self.client = None

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key, timeout=timeout, max_retries=max_retries)
            logger.info(f"OpenAI client initialized with model: {self.model}")
        else:
            logger.warning("No OpenAI API key provided")

    def chat(
        self,
        messages: List[Message],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024
    ) -> LLMResponse:
        """Send chat completion request to OpenAI."""
        if not self.client:
            raise ModelUnavailableError("OpenAI client not initialized. Check API key.")

        # Convert messages to OpenAI format
        openai_messages = []
        for msg in messages:
            openai_msg: Dict[str, Any] = {"role": msg.role, "content": msg.content}
            if msg.tool_call_id:
                openai_msg["tool_call_id"] = msg.tool_call_id
            if msg.tool_calls:
                openai_msg["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": json.dumps(tc.arguments)
                        }
                    }
                    for tc in msg.tool_calls
                ]
            openai_messages.append(openai_msg)

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": openai_messages,
            "temperature": temperature,
            "max_completion_tokens": max_tokens,
        }

        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = self.client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise ModelUnavailableError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise ModelUnavailableError("OpenAI returned no choices")

        choice = response.choices[0]
        content = choice.message.content or ""

        tool_calls = None
        if choice.message.tool_calls:
            tool_calls = []
            for tc in choice.message.tool_calls:
                tool_calls.append(ToolInvocationRequest(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=self._parse_arguments(tc.function.name, tc.function.arguments)
                ))

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content,
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=choice.finish_reason
        )

    @staticmethod
    def _parse_arguments(tool_name: str, raw: Optional[str]) -> Dict[str, Any]:
        """Decode the JSON argument string of a tool call."""
        if not raw:
            return {}
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Malformed arguments for tool call {tool_name}: {raw!r}")
            raise ModelUnavailableError(f"Malformed arguments for tool call {tool_name}") from e
        if not isinstance(arguments, dict):
            raise ModelUnavailableError(f"Arguments for tool call {tool_name} are not an object")
        return arguments

    def get_provider_name(self) -> str:
        """Get the provider name."""
        return "openai"

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
