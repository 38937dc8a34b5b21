"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator
from datetime import date, timedelta
from pathlib import Path

import pytest

from stockpile.core import db_client
from stockpile.core.cache_client import InMemoryCache
from stockpile.core.config import settings
from stockpile.services import registration
from stockpile.services.session_store import SessionStore


# Fixed reference date so expiry arithmetic does not depend on the wall clock
TODAY = date(2030, 6, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
async def sqlite_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncIterator[Path]:
    """Real SQLite database in a temporary directory, schema initialized."""
    db_path = tmp_path / "stockpile-test.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()


@pytest.fixture
def memory_session_store(monkeypatch: pytest.MonkeyPatch) -> SessionStore:
    """Fresh in-memory session store used by the registration flow."""
    store = SessionStore(InMemoryCache(), timeout=timedelta(minutes=30))
    monkeypatch.setattr(registration, "session_store", store)
    return store


@pytest.fixture
def line_credentials(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    credentials = {"secret": "test-channel-secret", "token": "test-access-token"}
    monkeypatch.setattr(settings, "line_channel_secret", credentials["secret"])
    monkeypatch.setattr(settings, "line_channel_access_token", credentials["token"])
    return credentials
