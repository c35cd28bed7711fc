"""Pydantic models for API requests, responses and the chat transcript.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Role: Message author (user or model)
    - Message: Individual message in the session transcript
    - ChatRequest: Incoming chat request payload
    - ErrorResponse: JSON error body
"""

from src.models.schemas import ERROR_MARKER, ChatRequest, ErrorResponse, Message, Role

__all__ = ["ERROR_MARKER", "ChatRequest", "ErrorResponse", "Message", "Role"]
