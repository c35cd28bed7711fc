"""Integration tests for components working together as a system.

Coverage:
    - Chat proxy endpoint with real HTTP requests through ASGITransport
    - Conversation state driven through the stream client and proxy
    - Live model calls (when GEMINI_API_KEY is configured)
"""
