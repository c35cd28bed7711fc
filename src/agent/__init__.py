"""Agno model session for the hosted Gemini model.

Responsibilities:
    - Model session construction with fixed sampling configuration
    - Streaming text extraction from Agno run events
    - Environment-backed configuration

Maintains clean separation from the HTTP layer.
"""

from src.agent.chat_agent import ModelSession, UpstreamError, create_model_session
from src.agent.config import AgentConfig, get_agent_config

__all__ = [
    "AgentConfig",
    "ModelSession",
    "UpstreamError",
    "create_model_session",
    "get_agent_config",
]
