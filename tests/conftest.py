"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - app: Fresh FastAPI application per test
    - async_client: HTTPX client for API testing
    - test_config: Agent configuration with a dummy API key
    - fake_upstream: Replaces the Gemini session with scripted fragments
    - user: NiceGUI simulated user (from nicegui.testing.user_plugin)

Dependency overrides are cleared after every test.
"""

from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator, Iterable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.agent.config import AgentConfig
from src.api.app import create_app
from src.api.chat import get_config, get_session_factory

pytest_plugins = ["nicegui.testing.user_plugin"]


class FakeSession:
    """Scripted stand-in for ModelSession.

    Yields the given fragments, then raises ``error`` if one is set.
    """

    def __init__(self, fragments: Iterable[str], error: Exception | None = None) -> None:
        self.fragments = list(fragments)
        self.error = error
        self.messages: list[str] = []

    async def stream(self, message: str) -> AsyncIterator[str]:
        self.messages.append(message)
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


@pytest.fixture
def test_config() -> AgentConfig:
    """Return configuration with a dummy API key.

    Returns:
        AgentConfig that never reaches the real API.
    """
    return AgentConfig(api_key="test-gemini-key")


@pytest.fixture
def app(test_config: AgentConfig) -> Generator[FastAPI]:
    """Create a fresh application with the API key dependency satisfied.

    Yields:
        FastAPI application; overrides are cleared on teardown.
    """
    application = create_app()
    application.dependency_overrides[get_config] = lambda: test_config
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def fake_upstream(app: FastAPI) -> Callable[..., list[FakeSession]]:
    """Install a fake session factory on the app.

    Returns:
        Function taking ``fragments`` and optional ``error``; it returns the
        list that collects every session the endpoint creates.
    """

    def install(fragments: Iterable[str] = (), error: Exception | None = None) -> list[FakeSession]:
        created: list[FakeSession] = []
        scripted = list(fragments)

        def factory(config: AgentConfig) -> FakeSession:
            session = FakeSession(scripted, error)
            created.append(session)
            return session

        app.dependency_overrides[get_session_factory] = lambda: factory
        return created

    return install


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
