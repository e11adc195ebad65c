"""mlform – Pytest Configuration.

Shared fixtures for all tests.
"""

import os

# Pin the locale setup so a developer .env cannot change test outcomes
os.environ["ENVIRONMENT"] = "testing"
os.environ["BASE_LOCALE"] = "en"
os.environ["AVAILABLE_LOCALES"] = "en,fr,de"
os.environ["TRANSLATE_ENABLED"] = "true"

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from mlform.gateway.main import app


@pytest.fixture(autouse=True)
def clear_field_store():
    """Every test starts with no persisted fields."""
    from mlform.gateway.dependencies import field_store

    field_store.clear()
    yield field_store
    field_store.clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(base_locale="en", available_locales="en,fr,de", translate_enabled=True)


@pytest.fixture
def en_items() -> list[dict]:
    return [{"title": "Hello", "qty": 0}, {"title": "World", "qty": 5}]


@pytest.fixture
def fr_overrides() -> list[dict]:
    return [{"title": "Bonjour"}, {"title": "", "qty": 0}]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client():
    """Async test client for the FastAPI gateway."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
