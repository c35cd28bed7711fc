"""Unit tests for individual components in isolation.

Coverage:
    - agent/: Configuration and Agno event handling
    - ui/: Stream decoding, error messages and the conversation flow

Uses mocks for external services when needed.
"""
