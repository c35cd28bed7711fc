"""In-memory chat transcript and the submit flow that streams a reply into it.

Kept free of NiceGUI so the fragment handling can be driven by any async
fragment source, including a fake one in tests.
"""

import itertools
import logging
from collections.abc import AsyncIterator, Callable

from src.models.schemas import ERROR_MARKER, Message, Role
from src.ui.stream_client import send_message_stream

logger = logging.getLogger(__name__)

FragmentSource = Callable[[str], AsyncIterator[str]]


def _noop() -> None:
    pass


def _ignore(message: Message) -> None:
    pass


class Conversation:
    """Manages chat state for one page session.

    ``on_change`` fires when a message is added or loading flips;
    ``on_fragment`` fires with the reply each time it grows in place.

    Attributes:
        messages: Append-only transcript in display order.
        is_loading: True while a reply is being streamed.
    """

    def __init__(
        self,
        stream: FragmentSource = send_message_stream,
        on_change: Callable[[], None] = _noop,
        on_fragment: Callable[[Message], None] = _ignore,
        on_scroll: Callable[[], None] = _noop,
    ) -> None:
        self.messages: list[Message] = []
        self.is_loading: bool = False
        self._stream = stream
        self._on_change = on_change
        self._on_fragment = on_fragment
        self._on_scroll = on_scroll
        self._ids = itertools.count(1)

    def _append(self, role: Role, content: str) -> Message:
        message = Message(id=f"msg-{next(self._ids)}", role=role, content=content)
        self.messages.append(message)
        self._on_change()
        return message

    def can_submit(self, text: str) -> bool:
        return bool(text and text.strip()) and not self.is_loading

    async def submit(self, text: str) -> bool:
        """Send a message and stream the model's reply into the transcript.

        The user message is appended before any network activity. The first
        fragment creates the model message; later fragments extend it in
        place. A failure is shown as a model message instead of raising.

        Args:
            text: The user's message.

        Returns:
            False if the message was blank or a reply is still streaming.
        """
        if not self.can_submit(text):
            return False

        text = text.strip()
        self._append(Role.USER, text)
        self.is_loading = True
        self._on_change()

        reply: Message | None = None
        try:
            async for fragment in self._stream(text):
                if reply is None:
                    reply = self._append(Role.MODEL, fragment)
                else:
                    reply.content += fragment
                    self._on_fragment(reply)
            if reply is not None and ERROR_MARKER in reply.content:
                reply.incomplete = True
                logger.warning(f"Reply {reply.id} was cut short by a server error")
        except Exception as e:
            logger.error(f"Error in chat stream: {e}")
            self._append(
                Role.MODEL,
                f"An error occurred while communicating with the AI. {e}. Please try again.",
            )
        finally:
            self.is_loading = False
            self._on_change()
            self._on_scroll()
        return True

    def clear(self) -> None:
        """Start a new, empty conversation."""
        if self.is_loading:
            return
        self.messages.clear()
        self._on_change()
