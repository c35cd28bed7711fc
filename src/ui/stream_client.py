"""HTTP client for the chat proxy's plain-text stream."""

import codecs
import logging
import os
from collections.abc import AsyncGenerator, AsyncIterable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
CHAT_PATH = "/api/chat"


class ChatServerError(Exception):
    """Raised when the chat server cannot produce a reply."""


async def decode_stream(
    chunks: AsyncIterable[bytes], encoding: str = "utf-8"
) -> AsyncGenerator[str]:
    """Decode raw byte reads into text, keeping decoder state between reads.

    A multi-byte character split across two reads is held back until the
    rest of it arrives. Reads that decode to nothing are not yielded. Unlike
    ``Response.aiter_text``, which replaces bad bytes, decoding is strict: a
    body cut off mid-character raises ``UnicodeDecodeError`` on the final flush.
    """
    decoder = codecs.getincrementaldecoder(encoding)()
    async for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed response."""
    fallback = f"Server responded with status: {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return fallback


async def send_message_stream(
    message: str,
    client: httpx.AsyncClient | None = None,
    base_url: str | None = None,
) -> AsyncGenerator[str]:
    """Send a message to the chat proxy and yield the reply as it streams.

    Args:
        message: The user's message.
        client: Optional client to reuse; a new one is created otherwise.
        base_url: Proxy base URL. Defaults to the ``API_BASE_URL``
            environment variable, read at call time.

    Yields:
        Non-empty text fragments in arrival order.

    Raises:
        ChatServerError: If the server rejects the request, returns no body,
            or the connection fails while reading.
    """
    base_url = base_url or os.getenv("API_BASE_URL", DEFAULT_BASE_URL)
    url = f"{base_url}{CHAT_PATH}"
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=None)

    try:
        async with client.stream("POST", url, json={"message": message}) as response:
            if response.is_error:
                await response.aread()
                raise ChatServerError(_error_message(response))
            if response.status_code == httpx.codes.NO_CONTENT:
                raise ChatServerError("Response body is empty, no stream received from server.")

            async for text in decode_stream(response.aiter_bytes(), response.encoding or "utf-8"):
                yield text
    except ChatServerError as e:
        logger.error(f"Chat server error: {e}")
        raise
    except (httpx.HTTPError, UnicodeDecodeError) as e:
        logger.error(f"Error communicating with the chat server: {e}")
        raise ChatServerError(f"Failed to communicate with the chat server: {e}") from e
    finally:
        if owns_client:
            await client.aclose()
