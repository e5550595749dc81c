"""Agent loop: the state machine between the user, the model and the tools."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from llm.base_client import BaseLLMClient, LLMResponse
from memory.context_manager import ConversationContextManager
from memory.models import Turn
from memory.session_store import SessionMemoryStore
from schemas.errors import (
    ErrorKind,
    ModelUnavailableError,
    ToolLoopExceededError,
    WeatherAssistantError,
)
from .prompt import build_system_prompt
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


FALLBACK_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.MODEL_UNAVAILABLE: (
        "Sorry, I can't reach the weather service's assistant right now. "
        "Please try again in a moment."
    ),
    ErrorKind.TOOL_LOOP_EXCEEDED: (
        "Sorry, I couldn't work out an answer to that. "
        "Could you rephrase, or name the place more precisely?"
    ),
}


class AgentState(str, Enum):
    """States of one conversation turn."""
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOL = "executing_tool"
    RESPONDING = "responding"  # terminal, success
    FAILED = "failed"  # terminal, error


class AgentStep(BaseModel):
    """A single step taken during a turn."""
    round_trip: int
    state: AgentState
    tool_name: Optional[str] = None
    arguments: Optional[Dict[str, Any]] = None
    success: Optional[bool] = None
    error_kind: Optional[ErrorKind] = None


class AgentResult(BaseModel):
    """Outcome of one conversation turn."""
    session_id: str
    answer: str
    state: AgentState
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None  # internal cause, for logs only
    round_trips: int = 0
    tools_called: List[str] = Field(default_factory=list)
    steps: List[AgentStep] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == AgentState.RESPONDING


class AgentLoop:
    """
    Turns a user message plus session history into an answer.

    The model is asked for the next step; requested tools are dispatched
    through the registry and their results stored as tool-result turns;
    the model is asked again until it answers in text. Every turn goes
    into session memory, so the model sees what it already learned the
    same way it sees the conversation.

    Tool and validation failures become tool-result turns the model can
    react to. Only a failing model call or too many round trips end the
    turn in FAILED, with a fixed fallback answer.
    """

    DEFAULT_MAX_ROUND_TRIPS = 5

    def __init__(
        self,
        llm_client: Optional[BaseLLMClient],
        registry: ToolRegistry,
        store: SessionMemoryStore,
        context_manager: Optional[ConversationContextManager] = None,
        max_round_trips: int = DEFAULT_MAX_ROUND_TRIPS,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        serialize_session_turns: bool = True,
        system_prompt_builder: Callable[[], str] = build_system_prompt
    ):
        """
        Initialize agent loop.

        Args:
            llm_client: Model gateway (None means every turn fails as model unavailable)
            registry: Tools the model may call
            store: Session memory store
            context_manager: Builds model messages from memory (default: one over `store`)
            max_round_trips: Maximum model calls per user message
            temperature: Sampling temperature
            max_tokens: Maximum tokens per model response
            serialize_session_turns: Hold the session lock for the whole turn
            system_prompt_builder: Produces the system prompt for each turn
        """
        if max_round_trips < 1:
            raise ValueError("max_round_trips must be at least 1")

        self.llm_client = llm_client
        self.registry = registry
        self.store = store
        self.context_manager = context_manager or ConversationContextManager(store)
        self.max_round_trips = max_round_trips
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.serialize_session_turns = serialize_session_turns
        self.system_prompt_builder = system_prompt_builder

    def run(self, session_id: str, user_message: str) -> AgentResult:
        """
        Run one conversation turn.

        Args:
            session_id: Session the message belongs to
            user_message: The user's text

        Returns:
            AgentResult with the answer (or fallback message) and how it was reached
        """
        if self.serialize_session_turns:
            with self.store.session_lock(session_id):
                return self._run(session_id, user_message)
        return self._run(session_id, user_message)

    def _run(self, session_id: str, user_message: str) -> AgentResult:
        self.store.append(session_id, Turn.user(user_message))

        steps: List[AgentStep] = []
        tools_called: List[str] = []
        system_prompt = self.system_prompt_builder()
        tool_definitions = self.registry.get_definitions()

        for round_trip in range(1, self.max_round_trips + 1):
            logger.info(f"Agent round trip {round_trip}/{self.max_round_trips} (session {session_id})")

            try:
                response = self._call_model(system_prompt, session_id, tool_definitions)
            except ModelUnavailableError as e:
                logger.error(f"Model unavailable in session {session_id}: {e}")
                return self._failed(session_id, e, round_trip, steps, tools_called)

            if not response.wants_tools:
                answer = response.content.strip()
                self.store.append(session_id, Turn.assistant(answer))
                steps.append(AgentStep(round_trip=round_trip, state=AgentState.RESPONDING))
                logger.info(f"Agent answered in {round_trip} round trip(s) (session {session_id})")
                return AgentResult(
                    session_id=session_id,
                    answer=answer,
                    state=AgentState.RESPONDING,
                    round_trips=round_trip,
                    tools_called=tools_called,
                    steps=steps
                )

            if round_trip == self.max_round_trips:
                # No model call left to read the results, so don't run the tools
                break

            for request in response.tool_calls:
                result = self.registry.dispatch(request)
                self.store.append(session_id, Turn.from_tool_result(request, result))
                tools_called.append(request.name)
                steps.append(AgentStep(
                    round_trip=round_trip,
                    state=AgentState.EXECUTING_TOOL,
                    tool_name=request.name,
                    arguments=dict(request.arguments),
                    success=result.success,
                    error_kind=result.error_kind
                ))

        requested = ", ".join(tc.name for tc in response.tool_calls)
        error = ToolLoopExceededError(
            f"Model still requesting tools ({requested}) after {self.max_round_trips} round trips"
        )
        logger.warning(f"{error} (session {session_id})")
        return self._failed(session_id, error, self.max_round_trips, steps, tools_called)

    def _call_model(
        self,
        system_prompt: str,
        session_id: str,
        tool_definitions: List[Dict[str, Any]]
    ) -> LLMResponse:
        """Ask the model for the next step; any failure is ModelUnavailableError."""
        if self.llm_client is None:
            raise ModelUnavailableError("No LLM client configured")

        messages = self.context_manager.build_messages(system_prompt, session_id)

        try:
            response = self.llm_client.chat(
                messages=messages,
                tools=tool_definitions or None,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )
        except ModelUnavailableError:
            raise
        except Exception as e:
            raise ModelUnavailableError(f"{type(e).__name__}: {e}") from e

        if not response.wants_tools and not response.content.strip():
            raise ModelUnavailableError("Model returned neither text nor tool calls")
        return response

    def _failed(
        self,
        session_id: str,
        error: WeatherAssistantError,
        round_trips: int,
        steps: List[AgentStep],
        tools_called: List[str]
    ) -> AgentResult:
        """Terminal FAILED result carrying the fallback answer for the error's kind."""
        steps.append(AgentStep(
            round_trip=round_trips,
            state=AgentState.FAILED,
            error_kind=error.kind
        ))
        return AgentResult(
            session_id=session_id,
            answer=FALLBACK_MESSAGES[error.kind],
            state=AgentState.FAILED,
            error_kind=error.kind,
            error_detail=str(error),
            round_trips=round_trips,
            tools_called=tools_called,
            steps=steps
        )
