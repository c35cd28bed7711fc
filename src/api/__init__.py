"""FastAPI endpoints for the Gemini chat proxy.

HTTP and streaming routes with async request handling.
Relays model output as a chunked plain-text stream.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Stream a model reply for one message
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
