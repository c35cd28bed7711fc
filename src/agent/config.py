"""Agent configuration with environment variable loading.

Pydantic-based configuration for the upstream Gemini model session.
Sampling parameters are held constant so every request sees the same model
behaviour.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class AgentConfig(BaseModel):
    """Configuration for the upstream Gemini model.

    Attributes:
        api_key: Google AI API key for model access.
        model_name: Gemini model identifier.
        temperature: Sampling temperature.
        top_p: Nucleus sampling probability mass.
        top_k: Number of highest-probability tokens considered.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        validate_default=True,
        description="API key for the Gemini API",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.9,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    top_p: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Nucleus sampling threshold",
    )
    top_k: int = Field(
        default=1,
        ge=1,
        description="Top-k sampling cutoff",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set GEMINI_API_KEY or API_KEY in .env")
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Reads the environment on every call; nothing is cached.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValidationError: If no API key is set.
    """
    return AgentConfig()
