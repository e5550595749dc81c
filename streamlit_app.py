"""Weather Chat Assistant - Streamlit App with Chat UI."""

import os
import streamlit as st
from config.settings import Settings
from orchestrator import WeatherAssistantOrchestrator


st.set_page_config(
    page_title="Weather Chat Assistant",
    page_icon="🌦️",
    layout="wide"
)

# Initialize session state
if "session_id" not in st.session_state:
    st.session_state.session_id = WeatherAssistantOrchestrator.new_session_id()

if "messages" not in st.session_state:
    st.session_state.messages = []

if "orchestrator" not in st.session_state:
    st.session_state.orchestrator = None


def reset_conversation():
    """Reset conversation state."""
    if st.session_state.orchestrator is not None:
        st.session_state.orchestrator.reset_session(st.session_state.session_id)
    st.session_state.session_id = WeatherAssistantOrchestrator.new_session_id()
    st.session_state.messages = []
    st.session_state.orchestrator = None


def get_orchestrator(settings: Settings) -> WeatherAssistantOrchestrator:
    """Get or create orchestrator instance matching the sidebar settings."""
    if st.session_state.orchestrator is None:
        st.session_state.orchestrator = WeatherAssistantOrchestrator(settings=settings)
    else:
        st.session_state.orchestrator = st.session_state.orchestrator.with_settings(settings)
    return st.session_state.orchestrator


# Sidebar configuration
st.sidebar.header("Configuration")

# LLM Provider selection
llm_provider = st.sidebar.selectbox(
    "LLM Provider",
    options=["openai", "anthropic"],
    index=0,
    help="Select which LLM answers the questions"
)

# API Keys
openai_api_key = st.sidebar.text_input(
    "OpenAI API Key",
    value=os.environ.get("OPENAI_API_KEY", ""),
    type="password",
    help="Required for OpenAI provider"
)

anthropic_api_key = st.sidebar.text_input(
    "Anthropic API Key",
    value=os.environ.get("ANTHROPIC_API_KEY", ""),
    type="password",
    help="Required for Anthropic provider"
)

st.sidebar.markdown("---")

default_unit = st.sidebar.radio(
    "Default temperature unit",
    options=["celsius", "fahrenheit"],
    index=0,
    help="Used when the question does not name a unit"
)

# Advanced settings
with st.sidebar.expander("Advanced Settings"):
    max_round_trips = st.slider(
        "Max model round trips per question",
        min_value=1,
        max_value=9,
        value=5
    )

    memory_window = st.slider(
        "Turns remembered per conversation",
        min_value=2,
        max_value=50,
        value=20
    )

    show_debug = st.checkbox("Show debug info", value=False)

# New Conversation button
if st.sidebar.button("Start New Conversation", type="secondary"):
    reset_conversation()
    st.rerun()

# Display conversation info
st.sidebar.markdown("---")
st.sidebar.caption(f"Session ID: {st.session_state.session_id[:8]}...")

# Main content
st.title("Weather Chat Assistant")
st.markdown("Current conditions and forecasts for places around the world")

# Display chat messages
for message in st.session_state.messages:
    with st.chat_message(message["role"]):
        st.markdown(message["content"])

# Chat input
if prompt := st.chat_input("Ask about the weather..."):
    st.session_state.messages.append({"role": "user", "content": prompt})

    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner("Checking the weather..."):
            settings = Settings(
                llm_provider=llm_provider,
                openai_api_key=openai_api_key if openai_api_key else None,
                anthropic_api_key=anthropic_api_key if anthropic_api_key else None,
                default_unit=default_unit,
                max_round_trips=max_round_trips,
                memory_window=memory_window,
                verbose=show_debug,
            )
            orchestrator = get_orchestrator(settings)

            try:
                result = orchestrator.respond(st.session_state.session_id, prompt)
                response = result.answer
                st.markdown(response)

                if show_debug:
                    llm_status = orchestrator.llm_client.get_model_name() if orchestrator.llm_client else "Disabled"
                    st.info(f"LLM: {llm_status}")
                    st.info(f"Round trips: {result.round_trips} | Final state: {result.state.value}")
                    if result.error_kind:
                        st.warning(f"{result.error_kind.value}: {result.error_detail}")
                    for step in result.steps:
                        if step.tool_name:
                            st.code(
                                f"{step.tool_name}({step.arguments}) -> "
                                f"{'ok' if step.success else step.error_kind.value}"
                            )
            except ValueError as e:
                response = f"Error processing question: {e}"
                st.error(response)

            st.session_state.messages.append({"role": "assistant", "content": response})

# Welcome message if no messages
if not st.session_state.messages:
    st.markdown("""
    ### Welcome!

    I'm your weather assistant. I can look up current conditions and forecasts up to 16 days ahead.

    **Try asking:**
    - "What's the weather like in Paris right now?"
    - "Will it rain in Springfield, US this weekend?"
    - "Give me the 5-day forecast for Tokyo in fahrenheit"

    **Tips:**
    - Add a country when a city name is ambiguous
    - The conversation history is preserved - ask follow-up questions like "and tomorrow?"
    """)

# Footer
st.sidebar.markdown("---")
st.sidebar.markdown("Built with Streamlit and Open-Meteo")
