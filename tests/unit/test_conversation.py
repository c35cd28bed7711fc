"""Unit tests for the Conversation transcript and submit flow.

Fragment sources are plain async generators; no network is involved.
"""

from collections.abc import AsyncIterator, Iterable

import pytest

from src.models.schemas import Role
from src.ui.conversation import Conversation
from src.ui.stream_client import ChatServerError


class ScriptedStream:
    """Fragment source that records how the conversation looked when called."""

    def __init__(self, fragments: Iterable[str] = (), error: Exception | None = None) -> None:
        self.fragments = list(fragments)
        self.error = error
        self.calls: list[str] = []
        self.conversation: Conversation | None = None
        self.transcript_len_at_call: int | None = None
        self.loading_at_call: bool | None = None

    async def __call__(self, message: str) -> AsyncIterator[str]:
        self.calls.append(message)
        if self.conversation is not None:
            self.transcript_len_at_call = len(self.conversation.messages)
            self.loading_at_call = self.conversation.is_loading
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


def make_conversation(stream: ScriptedStream) -> Conversation:
    conversation = Conversation(stream=stream)
    stream.conversation = conversation
    return conversation


class TestSubmit:
    """Tests for Conversation.submit."""

    async def test_user_message_appended_before_stream_starts(self) -> None:
        """The user's message is in the transcript before the request goes out."""
        stream = ScriptedStream(["ok"])
        conversation = make_conversation(stream)

        await conversation.submit("hello")

        assert stream.transcript_len_at_call == 1
        assert stream.loading_at_call is True
        assert conversation.messages[0].role == Role.USER
        assert conversation.messages[0].content == "hello"

    async def test_fragments_concatenate_into_one_model_message(self) -> None:
        """Three fragments produce exactly one model message."""
        conversation = make_conversation(ScriptedStream(["Hel", "lo", " world"]))

        await conversation.submit("greet me")

        model_messages = [m for m in conversation.messages if m.role == Role.MODEL]
        assert len(model_messages) == 1
        assert model_messages[0].content == "Hello world"
        assert model_messages[0].incomplete is False

    async def test_model_message_identity_is_preserved(self) -> None:
        """Later fragments extend the same message object in place."""
        seen: list[object] = []
        conversation: Conversation

        async def stream(message: str) -> AsyncIterator[str]:
            yield "first"
            seen.append(conversation.messages[-1])
            yield " second"
            seen.append(conversation.messages[-1])

        conversation = Conversation(stream=stream)

        await conversation.submit("hi")

        assert seen[0] is seen[1]
        assert seen[0] is conversation.messages[-1]
        assert len(conversation.messages) == 2

    async def test_zero_fragments_adds_no_model_message(self) -> None:
        """An empty reply leaves only the user message."""
        conversation = make_conversation(ScriptedStream([]))

        await conversation.submit("hello")

        assert [m.role for m in conversation.messages] == [Role.USER]

    async def test_failure_becomes_model_message(self) -> None:
        """Errors are shown in the transcript rather than raised."""
        stream = ScriptedStream(error=ChatServerError("quota exceeded"))
        conversation = make_conversation(stream)

        result = await conversation.submit("hello")

        assert result is True
        assert len(conversation.messages) == 2
        error_message = conversation.messages[1]
        assert error_message.role == Role.MODEL
        assert error_message.content == (
            "An error occurred while communicating with the AI. quota exceeded. Please try again."
        )

    async def test_failure_after_partial_reply_keeps_partial_text(self) -> None:
        """Text received before the failure stays, followed by the error."""
        stream = ScriptedStream(["partial"], error=ChatServerError("reset"))
        conversation = make_conversation(stream)

        await conversation.submit("hello")

        assert [m.content for m in conversation.messages[1:]] == [
            "partial",
            "An error occurred while communicating with the AI. reset. Please try again.",
        ]

    @pytest.mark.parametrize("error", [None, ChatServerError("boom")])
    async def test_loading_cleared_and_scrolled_after_exchange(
        self, error: Exception | None
    ) -> None:
        """Loading is reset and the view scrolls once, on success or failure."""
        scrolls: list[bool] = []
        conversation = Conversation(
            stream=ScriptedStream(["x"], error=error),
            on_scroll=lambda: scrolls.append(conversation.is_loading),
        )

        await conversation.submit("hello")

        assert conversation.is_loading is False
        assert scrolls == [False]

    async def test_error_marker_flags_reply_incomplete(self) -> None:
        """A reply carrying the mid-stream marker is flagged as degraded."""
        conversation = make_conversation(
            ScriptedStream(["Hello", "\nERROR: Failed to get response from Gemini API: boom"])
        )

        await conversation.submit("hello")

        assert conversation.messages[-1].incomplete is True

    async def test_quoted_error_line_is_not_flagged(self) -> None:
        """Model text that merely contains an ERROR line is a complete reply."""
        conversation = make_conversation(
            ScriptedStream(["Here is the log line:", "\nERROR: disk full\n", "Free some space."])
        )

        await conversation.submit("what does this log mean?")

        assert conversation.messages[-1].incomplete is False

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_is_ignored(self, text: str) -> None:
        """Blank input adds nothing and sends nothing."""
        stream = ScriptedStream(["unused"])
        conversation = make_conversation(stream)

        assert await conversation.submit(text) is False
        assert conversation.messages == []
        assert stream.calls == []

    async def test_submit_while_loading_is_ignored(self) -> None:
        """A second message is not accepted while a reply is streaming."""
        stream = ScriptedStream(["unused"])
        conversation = make_conversation(stream)
        conversation.is_loading = True

        assert await conversation.submit("hello") is False
        assert conversation.messages == []
        assert stream.calls == []

    async def test_text_is_stripped(self) -> None:
        """Surrounding whitespace is not sent or shown."""
        stream = ScriptedStream(["ok"])
        conversation = make_conversation(stream)

        await conversation.submit("  hi there \n")

        assert stream.calls == ["hi there"]
        assert conversation.messages[0].content == "hi there"

    async def test_message_ids_are_unique_across_turns(self) -> None:
        """Every message in the session gets its own id."""
        conversation = make_conversation(ScriptedStream(["a", "b"]))

        await conversation.submit("one")
        await conversation.submit("two")

        ids = [m.id for m in conversation.messages]
        assert len(ids) == 4
        assert len(set(ids)) == 4

    async def test_fragments_update_reply_in_place(self) -> None:
        """Growth of the reply is reported through on_fragment, not on_change."""
        grown: list[tuple[str, str]] = []
        changes: list[int] = []
        conversation: Conversation

        conversation = Conversation(
            stream=ScriptedStream(["a", "b", "c"]),
            on_change=lambda: changes.append(len(conversation.messages)),
            on_fragment=lambda message: grown.append((message.id, message.content)),
        )

        await conversation.submit("go")

        reply_id = conversation.messages[-1].id
        assert grown == [(reply_id, "ab"), (reply_id, "abc")]
        # user added, loading on, reply added, loading off
        assert changes == [1, 1, 2, 2]


class TestClear:
    """Tests for Conversation.clear."""

    async def test_clear_empties_transcript(self) -> None:
        """A new chat starts from an empty transcript."""
        conversation = make_conversation(ScriptedStream(["ok"]))
        await conversation.submit("hello")

        conversation.clear()

        assert conversation.messages == []

    async def test_clear_is_ignored_while_loading(self) -> None:
        """The transcript is kept while a reply is streaming."""
        conversation = make_conversation(ScriptedStream(["ok"]))
        await conversation.submit("hello")
        conversation.is_loading = True

        conversation.clear()

        assert len(conversation.messages) == 2
