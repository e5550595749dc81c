"""Main orchestrator for the Weather Chat Assistant."""

import uuid
import logging
from typing import Optional, List, Dict, Any

from config.settings import Settings

# Lookup services
from services.geocoding_client import GeocodingClient
from services.weather_client import WeatherClient

# LLM components
from llm.factory import create_llm_client, LLMProvider
from llm.base_client import BaseLLMClient

# Memory components
from memory.session_store import SessionMemoryStore
from memory.context_manager import ConversationContextManager

# Agent components
from agent.tools import WeatherTools, build_weather_registry
from agent.loop import AgentLoop, AgentResult, AgentState

logger = logging.getLogger(__name__)


class WeatherAssistantOrchestrator:
    """Wires settings, model gateway, session memory, tools and the agent loop together."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        llm_client: Optional[BaseLLMClient] = None,
        geocoding_client: Optional[GeocodingClient] = None,
        weather_client: Optional[WeatherClient] = None,
        store: Optional[SessionMemoryStore] = None
    ):
        """
        Initialize orchestrator.

        Args:
            settings: Application settings
            llm_client: Model gateway (default: built from settings)
            geocoding_client: Place lookup client (default: built from settings)
            weather_client: Weather lookup client (default: built from settings)
            store: Session memory store (default: built from settings)
        """
        self.settings = settings or Settings()

        # Initialize LLM client
        self.llm_client: Optional[BaseLLMClient] = llm_client
        if self.llm_client is None:
            self._init_llm_client()

        # Initialize memory
        self.store = store or SessionMemoryStore(
            window_size=self.settings.memory_window,
            session_ttl_seconds=self.settings.session_ttl_seconds,
            shard_count=self.settings.session_shards
        )
        self.context_manager = ConversationContextManager(self.store)

        # Initialize tools
        self.geocoding_client = geocoding_client or GeocodingClient(
            base_url=self.settings.geocoding_base_url,
            timeout=self.settings.http_timeout_seconds
        )
        self.weather_client = weather_client or WeatherClient(
            base_url=self.settings.weather_base_url,
            timeout=self.settings.http_timeout_seconds
        )
        self._init_tools()

        # Initialize agent loop
        self.agent_loop = AgentLoop(
            llm_client=self.llm_client,
            registry=self.registry,
            store=self.store,
            context_manager=self.context_manager,
            max_round_trips=self.settings.max_round_trips,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            serialize_session_turns=self.settings.serialize_session_turns
        )

    def _init_llm_client(self):
        """Initialize LLM client based on settings."""
        api_key = self.settings.get_llm_api_key()

        if not api_key:
            logger.warning(
                f"No API key for {self.settings.llm_provider}. "
                "Every question will get the model-unavailable fallback."
            )
            return

        try:
            provider = LLMProvider(self.settings.llm_provider)
            self.llm_client = create_llm_client(
                provider=provider,
                api_key=api_key,
                model=self.settings.llm_model,
                timeout=self.settings.model_timeout_seconds,
                max_retries=self.settings.model_max_retries
            )
            logger.info(
                f"LLM client initialized: {self.settings.llm_provider} "
                f"({self.llm_client.get_model_name()})"
            )
        except Exception as e:
            logger.error(f"Failed to initialize LLM client: {e}")
            self.llm_client = None

    def _init_tools(self):
        """Bind the weather tools to the schema table."""
        self.tools = WeatherTools(
            geocoding_client=self.geocoding_client,
            weather_client=self.weather_client,
            default_unit=self.settings.default_unit
        )
        self.registry = build_weather_registry(self.tools, self.settings.tools_config_path)
        logger.info(f"Tools registered: {', '.join(self.registry.names())}")

    def with_settings(self, settings: Settings) -> "WeatherAssistantOrchestrator":
        """
        Return an orchestrator configured by `settings`.

        Returns self when nothing changed. Otherwise builds a new one; it
        keeps this session store (and so every conversation) unless the
        memory settings changed.

        Args:
            settings: Desired application settings

        Returns:
            Orchestrator matching `settings`
        """
        if settings == self.settings:
            return self

        same_memory = (
            settings.memory_window == self.settings.memory_window
            and settings.session_ttl_seconds == self.settings.session_ttl_seconds
            and settings.session_shards == self.settings.session_shards
        )
        logger.info("Settings changed; rebuilding orchestrator")
        return WeatherAssistantOrchestrator(
            settings=settings,
            store=self.store if same_memory else None
        )

    @staticmethod
    def new_session_id() -> str:
        """Generate an identifier for a new conversation."""
        return str(uuid.uuid4())

    def respond(self, session_id: str, message: str) -> AgentResult:
        """
        Run one conversation turn and return the full result.

        Args:
            session_id: Conversation identifier
            message: User message

        Returns:
            AgentResult with the answer and the steps taken

        Raises:
            ValueError: If the session ID or message is empty
        """
        if not session_id or not session_id.strip():
            raise ValueError("session_id must not be empty")
        if not message or not message.strip():
            raise ValueError("message must not be empty")

        if self.settings.verbose:
            print(f"\n{'='*60}")
            print(f"SESSION: {session_id}")
            print(f"QUESTION: {message}")
            print(f"{'='*60}\n")

        result = self.agent_loop.run(session_id, message.strip())

        if self.settings.verbose:
            print(f"  Round trips: {result.round_trips}")
            print(f"  Tools called: {result.tools_called}")
            print(f"  Final state: {result.state.value}")
            if result.state == AgentState.FAILED:
                print(f"  Failure: {result.error_kind.value} ({result.error_detail})")

        return result

    def chat(self, session_id: str, message: str) -> str:
        """
        Answer a user message within a session.

        Never raises for model or tool failures; those produce a fallback answer.

        Args:
            session_id: Conversation identifier
            message: User message

        Returns:
            Assistant's answer
        """
        return self.respond(session_id, message).answer

    def get_conversation_history(self, session_id: str) -> List[Dict[str, Any]]:
        """Get the visible turns of a session for display."""
        return [
            {"role": turn.role.value, "content": turn.content, "timestamp": turn.timestamp}
            for turn in self.store.snapshot(session_id)
        ]

    def reset_session(self, session_id: str) -> bool:
        """Forget a session's history. Returns False if it did not exist."""
        return self.store.discard(session_id)


# Alias for backward compatibility
Orchestrator = WeatherAssistantOrchestrator
