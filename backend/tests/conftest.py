"""Pytest configuration and fixtures."""

import os

# Settings require these; set before the application modules are imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402

from homework_helper.api.deps import get_hint_generator, get_image_reader  # noqa: E402
from homework_helper.db.base import Base  # noqa: E402
from homework_helper.db.session import Database  # noqa: E402
from homework_helper.main import app  # noqa: E402
from homework_helper.services.hint_generator import HintGenerator  # noqa: E402
from homework_helper.services.image_reader import ImageReader  # noqa: E402

DEFAULT_REPLY = "Try isolating the variable first."


class FakeMessages:
    """Stands in for `AsyncAnthropic().messages`.

    Replies are consumed in order; an Exception instance is raised instead
    of returned. Every call's keyword arguments are recorded.
    """

    def __init__(self):
        self.replies: list = []
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else DEFAULT_REPLY
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])


class FakeAnthropic:
    def __init__(self):
        self.messages = FakeMessages()


@pytest.fixture
def fake_llm() -> FakeAnthropic:
    return FakeAnthropic()


@pytest.fixture
def generator(fake_llm) -> HintGenerator:
    return HintGenerator(client=fake_llm)


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """A fresh SQLite database with all tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    database = Database(engine)
    yield database
    await database.dispose()


@pytest.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
async def client(database, fake_llm) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app.state.database = database
    app.dependency_overrides[get_hint_generator] = lambda: HintGenerator(client=fake_llm)
    app.dependency_overrides[get_image_reader] = lambda: ImageReader(client=fake_llm)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def signup_and_login(client: AsyncClient, email: str, password: str = "secret123") -> dict[str, str]:
    """Create an account and return bearer auth headers for it."""
    response = await client.post(
        "/auth/signup",
        json={"name": email.split("@")[0], "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = await client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Keep requests explicit: authenticate with the header, not the cookie jar
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
async def auth_headers(client) -> dict[str, str]:
    return await signup_and_login(client, "student@example.com")
