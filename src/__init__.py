"""Gemini Chat - minimal chat front-end for a hosted generative model.

Combines FastAPI for the streaming proxy, Agno for the model session,
NiceGUI for the chat page, httpx for the stream client, and Pydantic for
data validation.

Components:
    - api: Chat proxy endpoint and application factory
    - agent: Gemini model session and configuration
    - ui: Stream client, conversation state and chat page
    - models: Request, error and transcript schemas
"""

__version__ = "0.1.0"
