"""Test package for Gemini Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: The FastAPI app driven over HTTP, alone and with the UI state

The Gemini session is replaced with a scripted fake except in tests that
require a real API key.
"""
