"""Chat proxy endpoint relaying Gemini output as a chunked text stream.

Each request opens its own single-turn model session. The response body is
the plain concatenation of the model's text fragments, with no framing.
Failures before the first byte are reported as JSON; failures after that
are appended to the open stream as a plain-text marker.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from typing import Protocol

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from src.agent.chat_agent import create_model_session
from src.agent.config import AgentConfig, get_agent_config
from src.models.schemas import ERROR_MARKER, ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

MISSING_KEY_ERROR = (
    "Server error: Gemini API key is missing or invalid. "
    "Please check the server environment variables."
)
UPSTREAM_ERROR = "Failed to get response from Gemini API. Please try again later."

STREAM_HEADERS = {
    "Transfer-Encoding": "chunked",
    "Cache-Control": "no-cache",
}


class TextStreamSession(Protocol):
    """Anything that can stream a model reply for one message."""

    def stream(self, message: str) -> AsyncIterator[str]: ...


SessionFactory = Callable[[AgentConfig], TextStreamSession]


def get_config() -> AgentConfig:
    """Load the upstream configuration for this request.

    Raises:
        HTTPException: 500 if the API key is not configured.
    """
    try:
        return get_agent_config()
    except ValidationError as e:
        logger.error("Gemini API client not initialized due to missing API key")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=MISSING_KEY_ERROR,
        ) from e


def get_session_factory() -> SessionFactory:
    """Return the callable that builds a fresh model session per request."""
    return create_model_session


async def _first_fragment(fragments: AsyncIterator[str]) -> str | None:
    """Wait for the first non-empty fragment, or None if the stream is empty."""
    async for fragment in fragments:
        if fragment:
            return fragment
    return None


async def _relay(first: str | None, fragments: AsyncIterator[str]) -> AsyncGenerator[bytes]:
    """Write fragments to the response as they arrive.

    Headers are already sent when this runs, so an upstream failure can only
    be reported by appending a marker to the body.
    """
    if first is None:
        return
    yield first.encode("utf-8")
    try:
        async for fragment in fragments:
            if fragment:
                yield fragment.encode("utf-8")
    except Exception as e:
        logger.exception("Upstream stream failed after response started")
        yield f"{ERROR_MARKER}{e}".encode()


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest,
    config: AgentConfig = Depends(get_config),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> Response:
    """Relay a single message to Gemini and stream the reply.

    Args:
        request: Chat request with the user's message.
        config: Upstream configuration (API key, model, sampling).
        session_factory: Builds the per-request model session.

    Returns:
        A chunked ``text/plain`` stream of the model's reply, or a JSON
        error if the upstream fails before producing any text.
    """
    logger.info(f"Chat request received ({len(request.message)} chars)")

    try:
        session = session_factory(config)
        fragments = session.stream(request.message)
        first = await _first_fragment(fragments)
    except Exception:
        logger.exception("Error sending message to Gemini before streaming started")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=UPSTREAM_ERROR).model_dump(),
        )

    return StreamingResponse(
        _relay(first, fragments),
        media_type="text/plain",
        headers=STREAM_HEADERS,
    )
