"""Pytest configuration and shared fixtures."""

import os
from typing import Callable, List, Optional, Union

import pytest
import pytest_asyncio

# Set required environment variables for testing BEFORE importing app
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_ISSUER", "https://auth.example.com")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("SMTP_USER", "summaries@example.com")
os.environ.setdefault("SMTP_PASSWORD", "test-smtp-password")

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from meeting_summarizer.core.auth import get_current_user
from meeting_summarizer.core.database import DatabaseClient
from meeting_summarizer.main import app
from meeting_summarizer.schemas.auth import CurrentUser


class FakeTextGenerator:
    """Records every prompt and answers from a script.

    ``responses`` may be a list consumed in order or a callable receiving the
    prompt. An exception instance in the list is raised instead of returned.
    """

    def __init__(self, responses: Optional[Union[List, Callable[[str], str]]] = None):
        self.responses = responses
        self.prompts: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.responses is None:
            return f"summary {len(self.prompts)}"
        if callable(self.responses):
            return self.responses(prompt)

        answer = self.responses[len(self.prompts) - 1]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    The lifespan does not run, so every dependency that reads app.state must
    be overridden by the test.
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def current_user() -> CurrentUser:
    return CurrentUser(id="user-123", email="owner@example.com")


@pytest.fixture
def authenticated(current_user: CurrentUser) -> CurrentUser:
    """Bypass token verification for the duration of a test."""
    app.dependency_overrides[get_current_user] = lambda: current_user
    return current_user


@pytest.fixture
def fake_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest_asyncio.fixture
async def db_client():
    """In-memory SQLite database with the schema created."""
    client = DatabaseClient(create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool))
    await client.create_tables()
    yield client
    await client.disconnect()


@pytest_asyncio.fixture
async def db_session(db_client: DatabaseClient):
    async with db_client.session_maker() as session:
        yield session
