from enum import Enum

from pydantic import BaseModel, Field, field_validator

# Prefix written into an open response when the upstream fails mid-stream.
ERROR_MARKER = "\nERROR: Failed to get response from Gemini API: "


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    MODEL = "model"


class Message(BaseModel):
    """A single message in the session transcript.

    Attributes:
        id: Opaque identifier, unique within a conversation.
        role: Who wrote the message.
        content: Message text; grows while a model reply streams in.
        incomplete: True when the reply was cut short by an upstream error.
    """

    id: str
    role: Role
    content: str
    incomplete: bool = False


class ChatRequest(BaseModel):
    """Request payload for the chat proxy endpoint.

    Attributes:
        message: User's prompt.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ErrorResponse(BaseModel):
    """JSON body returned for every error raised before streaming starts."""

    error: str
