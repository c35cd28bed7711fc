"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with streaming support
    - Input handling, disabled while a reply streams
    - Scroll to the latest message

The transcript and submit flow live in ``conversation``; the HTTP stream
reader lives in ``stream_client``. The page module only renders.
"""
