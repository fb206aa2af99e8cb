"""Pytest configuration and shared fixtures.

Every test runs against the in-memory database. The store is process-wide, so
it is disposed before and after each test and apps are built per test.
"""

from __future__ import annotations

import os

# Settings are validated at import time; pin the test defaults before importing the app.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("MOCK_DB", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections.abc import AsyncIterator, Callable  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from newsdesk.core.config import Settings  # noqa: E402
from newsdesk.core.rate_limit import limiter  # noqa: E402
from newsdesk.db.client import ClientFactory, dispose_mock_store  # noqa: E402
from newsdesk.db.config import resolve_database_config  # noqa: E402
from newsdesk.main import create_app  # noqa: E402


def make_test_settings(**overrides: Any) -> Settings:
    """Settings isolated from the developer's .env and environment."""
    values: dict[str, Any] = {
        "environment": "test",
        "mock_db": True,
        "mock_seed_data": False,
        "database_url": None,
        "supabase_url": "",
        "supabase_anon_key": "",
        "supabase_service_key": None,
        "rate_limit_enabled": False,
        "dify_api_key": None,
        "dify_app_id": None,
        "dify_workflow_id": None,
        "dify_user_id": None,
        "llm_provider": None,
        "openai_api_key": None,
        "anthropic_api_key": None,
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build isolated settings with overrides, e.g. ``settings_factory(mock_db=False)``."""
    return make_test_settings


@pytest_asyncio.fixture(autouse=True)
async def mock_store() -> AsyncIterator[None]:
    """Start every test from an empty in-memory database."""
    await dispose_mock_store()
    yield
    await dispose_mock_store()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return make_test_settings(
        local_upload_dir=str(tmp_path / "uploads"), local_upload_base_url="/uploads"
    )


@pytest.fixture
def seeded_settings(tmp_path: Path) -> Settings:
    return make_test_settings(
        mock_seed_data=True,
        local_upload_dir=str(tmp_path / "uploads"),
        local_upload_base_url="/uploads",
    )


def _build_app(app_settings: Settings) -> FastAPI:
    limiter.enabled = False
    return create_app(app_settings)


@pytest.fixture
def async_app(test_settings: Settings) -> FastAPI:
    """FastAPI app over an empty in-memory database (function-scoped)."""
    return _build_app(test_settings)


@pytest.fixture
def seeded_app(seeded_settings: Settings) -> FastAPI:
    """FastAPI app over the in-memory database seeded with the fixture rows."""
    return _build_app(seeded_settings)


@pytest_asyncio.fixture
async def async_http_client(async_app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Creates an async http client."""
    transport = ASGITransport(app=async_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    async_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded_http_client(seeded_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=seeded_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    seeded_app.dependency_overrides.clear()


async def _session_for(app_settings: Settings) -> AsyncIterator[AsyncSession]:
    client = ClientFactory(resolve_database_config(app_settings)).create("test-request")
    assert client is not None
    async with client.session() as session:
        yield session


@pytest_asyncio.fixture
async def db_session(test_settings: Settings) -> AsyncIterator[AsyncSession]:
    """Session on an empty in-memory database; tests commit or roll back as they need."""
    async for session in _session_for(test_settings):
        yield session


@pytest_asyncio.fixture
async def seeded_session(seeded_settings: Settings) -> AsyncIterator[AsyncSession]:
    async for session in _session_for(seeded_settings):
        yield session
