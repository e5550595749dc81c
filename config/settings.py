"""Application settings."""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

from schemas.weather import TemperatureUnit


DEFAULT_TOOLS_CONFIG = Path(__file__).parent / "tools.yaml"


class Settings(BaseModel):
    """Application configuration settings."""

    # LLM Provider settings
    llm_provider: str = "openai"  # "openai" or "anthropic"
    llm_model: Optional[str] = None  # Override default model

    # API Keys
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # Model gateway behaviour
    model_timeout_seconds: float = Field(30.0, gt=0)
    model_max_retries: int = Field(2, ge=0)
    temperature: float = Field(0.2, ge=0.0, le=1.0)
    max_tokens: int = Field(1024, ge=1)

    # Agent loop
    max_round_trips: int = Field(5, ge=1, le=9)

    # Memory settings
    memory_window: int = Field(20, ge=1)
    session_ttl_seconds: Optional[float] = Field(3600.0, gt=0)  # None disables expiry
    session_shards: int = Field(16, ge=1)
    serialize_session_turns: bool = True

    # Lookup services
    geocoding_base_url: str = "https://geocoding-api.open-meteo.com/v1"
    weather_base_url: str = "https://api.open-meteo.com/v1"
    http_timeout_seconds: float = Field(10.0, gt=0)
    default_unit: TemperatureUnit = TemperatureUnit.CELSIUS

    # Tool schema table
    tools_config_path: str = str(DEFAULT_TOOLS_CONFIG)

    # Logging
    verbose: bool = False

    def __init__(self, **data):
        # Auto-load provider selection and API keys from environment if not provided
        if data.get("llm_provider") is None and os.environ.get("LLM_PROVIDER"):
            data["llm_provider"] = os.environ["LLM_PROVIDER"].lower()

        if data.get("llm_model") is None and os.environ.get("LLM_MODEL"):
            data["llm_model"] = os.environ["LLM_MODEL"]

        if "openai_api_key" not in data or data["openai_api_key"] is None:
            data["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

        if "anthropic_api_key" not in data or data["anthropic_api_key"] is None:
            data["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

        # Callers pass None for "use the default"
        for key in ("llm_provider", "tools_config_path"):
            if key in data and data[key] is None:
                del data[key]

        super().__init__(**data)

    def get_llm_api_key(self) -> Optional[str]:
        """Get the API key for the configured LLM provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key
        elif self.llm_provider == "anthropic":
            return self.anthropic_api_key
        return None
