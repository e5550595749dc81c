"""Anthropic Claude LLM client implementation."""

import os
import logging
from typing import Optional, List, Dict, Any

import anthropic

from schemas.errors import ModelUnavailableError
from schemas.tools import ToolInvocationRequest
from .base_client import BaseLLMClient, Message, LLMResponse

logger = logging.getLogger(__name__)


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client implementation."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    # Sent when the memory window starts mid-exchange: the API wants a user turn first
    TRUNCATED_HISTORY_NOTE = "(Earlier conversation omitted.)"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 2
    ):
        """
        Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (falls back to ANTHROPIC_API_KEY env var)
            model: Model to use (default: claude-sonnet-4-20250514)
            timeout: Request timeout in seconds
            max_retries: Retries performed by the SDK before giving up
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model or self.DEFAULT_MODEL
        self.client = None

        if self.api_key:
            self.client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=timeout,
                max_retries=max_retries
            )
            logger.info(f"Anthropic client initialized with model: {self.model}")
        else:
            logger.warning("No Anthropic API key provided")

    def chat(
        self,
        messages: List[Message],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024
    ) -> LLMResponse:
        """Send chat completion request to Anthropic."""
        if not self.client:
            raise ModelUnavailableError("Anthropic client not initialized. Check API key.")

        system_content, conversation_messages = self._convert_messages(messages)

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": conversation_messages,
        }

        if system_content:
            kwargs["system"] = system_content

        anthropic_tools = self._convert_tools(tools)
        if anthropic_tools:
            kwargs["tools"] = anthropic_tools

        try:
            response = self.client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            raise ModelUnavailableError(f"Anthropic API error: {e}") from e

        content = ""
        tool_calls = []

        for block in response.content:
            if block.type == "text":
                content += block.text
            elif block.type == "tool_use":
                if not isinstance(block.input, dict):
                    raise ModelUnavailableError(
                        f"Arguments for tool call {block.name} are not an object"
                    )
                tool_calls.append(ToolInvocationRequest(
                    id=block.id,
                    name=block.name,
                    arguments=block.input
                ))

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            }

        return LLMResponse(
            content=content,
            tool_calls=tool_calls if tool_calls else None,
            usage=usage,
            finish_reason=response.stop_reason
        )

    def _convert_messages(self, messages: List[Message]):
        """Split out the system prompt and convert the rest to content blocks."""
        system_parts = []
        conversation_messages = []

        for msg in messages:
            if msg.role == "system":
                system_parts.append(msg.content)
            elif msg.role == "tool":
                conversation_messages.append({
                    "role": "user",
                    "content": [{
                        "type": "tool_result",
                        "tool_use_id": msg.tool_call_id,
                        "content": msg.content
                    }]
                })
            elif msg.role == "assistant" and msg.tool_calls:
                content_blocks = []
                if msg.content:
                    content_blocks.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls:
                    content_blocks.append({
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.arguments
                    })
                conversation_messages.append({
                    "role": "assistant",
                    "content": content_blocks
                })
            elif msg.content:
                conversation_messages.append({
                    "role": msg.role,
                    "content": msg.content
                })

        if conversation_messages and conversation_messages[0]["role"] != "user":
            conversation_messages.insert(0, {
                "role": "user",
                "content": self.TRUNCATED_HISTORY_NOTE
            })

        return "\n".join(system_parts).strip(), conversation_messages

    @staticmethod
    def _convert_tools(tools: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Convert OpenAI-style function definitions to Anthropic tools."""
        anthropic_tools = []
        for tool in tools or []:
            if tool.get("type") == "function":
                func = tool["function"]
                anthropic_tools.append({
                    "name": func["name"],
                    "description": func.get("description", ""),
                    "input_schema": func.get("parameters", {})
                })
        return anthropic_tools

    def get_provider_name(self) -> str:
        """Get the provider name."""
        return "anthropic"

    def get_model_name(self) -> str:
        """Get the model name."""
        return self.model
