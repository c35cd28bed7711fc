"""Agno model session with streaming support for the Gemini API.

Core module for talking to the hosted model.

Architecture Decisions:

1. **One session per request** - A ``ModelSession`` is constructed explicitly
   for every chat request and dropped afterwards. There is no module-level
   agent and no storage, so nothing is shared between concurrent requests
   and every exchange is a single turn.

2. **Service Wrapper** - Decouples the HTTP layer from Agno's interface. Agno
   streams run events with metadata; we extract only the text content.

3. **Errors propagate** - The session never turns a failure into text. The
   proxy endpoint decides how a failure is reported, depending on whether
   the response has already started.
"""

import logging
from collections.abc import AsyncGenerator

from agno.agent import Agent
from agno.models.google import Gemini
from agno.run.agent import RunEvent

from src.agent.config import AgentConfig, get_agent_config

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the model run reports an error instead of raising one."""


class ModelSession:
    """Single-turn session with the Gemini model.

    Wraps Agno's Agent with:
    - Fixed model id and sampling configuration
    - No history, storage or knowledge base
    - Clean streaming interface for the chat proxy
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the model session.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._agent = self._create_agent()

    def _create_agent(self) -> Agent:
        """Create the Agno agent instance.

        Returns:
            Stateless Agent backed by the Gemini model.
        """
        model = Gemini(
            id=self._config.model_name,
            api_key=self._config.api_key,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            top_k=self._config.top_k,
        )

        return Agent(
            model=model,
            add_history_to_context=False,
            markdown=False,
        )

    async def stream(self, message: str) -> AsyncGenerator[str]:
        """Stream response text for a single message.

        Args:
            message: The user's message.

        Yields:
            Non-empty text fragments in the order the model produces them.

        Raises:
            UpstreamError: If the run reports an error event.
        """
        logger.debug(f"Opening model stream ({self._config.model_name})")
        async for event in self._agent.arun(message, stream=True):
            kind = getattr(event, "event", None)
            if kind == RunEvent.run_error:
                raise UpstreamError(str(getattr(event, "content", "") or "model run failed"))
            if kind != RunEvent.run_content:
                continue
            content = getattr(event, "content", None)
            if isinstance(content, str) and content:
                yield content


def create_model_session(config: AgentConfig | None = None) -> ModelSession:
    """Construct a fresh model session.

    Args:
        config: Optional agent configuration.

    Returns:
        A new ModelSession; callers own it for one request.
    """
    return ModelSession(config=config)
