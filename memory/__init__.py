"""Per-session conversation memory."""

from .models import Session, Turn, TurnRole
from .session_store import SessionMemoryStore
from .context_manager import ConversationContextManager

__all__ = [
    "Session",
    "Turn",
    "TurnRole",
    "SessionMemoryStore",
    "ConversationContextManager",
]
