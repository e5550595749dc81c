"""Conversation context manager: turns session memory into LLM messages."""

import logging
from typing import List, Sequence

from .session_store import SessionMemoryStore
from .models import Turn, TurnRole
from llm.base_client import Message

logger = logging.getLogger(__name__)


class ConversationContextManager:
    """Builds the message list sent to the model from a session snapshot."""

    def __init__(self, store: SessionMemoryStore):
        """
        Initialize context manager.

        Args:
            store: Session memory store
        """
        self.store = store

    def get_context_messages(self, session_id: str) -> List[Message]:
        """
        Get messages for LLM context window.

        Args:
            session_id: Session ID

        Returns:
            List of Message objects for LLM context, oldest first
        """
        return self.turns_to_messages(self.store.snapshot(session_id))

    def build_messages(self, system_prompt: str, session_id: str) -> List[Message]:
        """System prompt followed by the session's visible history."""
        return [Message(role="system", content=system_prompt)] + self.get_context_messages(session_id)

    @staticmethod
    def turns_to_messages(turns: Sequence[Turn]) -> List[Message]:
        """
        Convert turns to provider-neutral messages.

        A tool-result turn expands into the assistant message that made the
        call followed by the tool response, so each pair stays matched even
        when window eviction has dropped the surrounding turns.
        """
        messages = []

        for turn in turns:
            if turn.role == TurnRole.TOOL_RESULT:
                if turn.tool_call is None:
                    logger.warning("Tool-result turn without its call; sending as context text")
                    messages.append(Message(role="user", content=f"[Tool result] {turn.content}"))
                    continue
                messages.append(Message(
                    role="assistant",
                    content="",
                    tool_calls=[turn.tool_call]
                ))
                messages.append(Message(
                    role="tool",
                    content=turn.content,
                    tool_call_id=turn.tool_call.id
                ))
            else:
                messages.append(Message(role=turn.role.value, content=turn.content))

        return messages

    def get_conversation_context_string(self, session_id: str) -> str:
        """
        Get conversation history as a single readable string.

        Args:
            session_id: Session ID

        Returns:
            Formatted transcript, empty if the session has no turns
        """
        turns = self.store.snapshot(session_id)

        if not turns:
            return ""

        parts = ["=== Conversation ==="]
        for turn in turns:
            if turn.role == TurnRole.TOOL_RESULT and turn.tool_call is not None:
                parts.append(f"TOOL {turn.tool_call.name}({turn.tool_call.arguments}): {turn.content}")
            else:
                parts.append(f"{turn.role.value.upper()}: {turn.content}")
        parts.append("=== End Conversation ===")

        return "\n".join(parts)
