"""Tests for the registration session store."""

from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest

from stockpile.core.cache_client import InMemoryCache
from stockpile.core.errors import StoreError
from stockpile.domain.session import (
    ConfirmingSession,
    EnteringNameSession,
    EnteringQuantitySession,
    IdleSession,
    Session,
    SessionState,
)
from stockpile.domain.stock import Category
from stockpile.services.session_store import SessionStore


USER_ID = "U1234567890abcdef"


class FakeClock:
    """Controllable wall clock shared by the store and its backend."""

    def __init__(self) -> None:
        self.current = datetime(2030, 6, 15, 9, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def monotonic(self) -> float:
        return self.current.timestamp()

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock=clock.monotonic)


@pytest.fixture
def store(backend: InMemoryCache, clock: FakeClock) -> SessionStore:
    return SessionStore(backend, timeout=timedelta(minutes=30), clock=clock.now)


class RejectingBackend(InMemoryCache):
    """Backend whose writes never succeed, as the Redis client reports during an outage."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        return False


async def _advance(store: SessionStore, state: SessionState, draft: dict[str, Any] | None = None) -> Session:
    return await store.update(await store.get(USER_ID), state=state, draft=draft)


@pytest.mark.unit
class TestGet:
    async def test_unknown_user_gets_idle_session(self, store: SessionStore) -> None:
        session = await store.get(USER_ID)

        assert isinstance(session, IdleSession)
        assert session.user_id == USER_ID
        assert session.draft == {}

    async def test_get_does_not_persist(self, store: SessionStore, backend: InMemoryCache) -> None:
        await store.get(USER_ID)

        assert await backend.get(f"session:{USER_ID}") is None

    async def test_returns_stored_session(self, store: SessionStore) -> None:
        await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})

        session = await store.get(USER_ID)

        assert isinstance(session, EnteringNameSession)
        assert session.category == Category.WATER

    async def test_sessions_are_per_user(self, store: SessionStore) -> None:
        await _advance(store, SessionState.SELECTING_CATEGORY)

        other = await store.get("U-other")

        assert other.state == SessionState.IDLE


@pytest.mark.unit
class TestUpdate:
    async def test_merges_draft_across_updates(self, store: SessionStore) -> None:
        session = await _advance(store, SessionState.ENTERING_NAME, {"category": Category.DISH})
        session = await store.update(session, state=SessionState.ENTERING_QUANTITY, draft={"name": "缶詰"})
        session = await store.update(session, state=SessionState.ENTERING_EXPIRY, draft={"quantity": 3})
        session = await store.update(session, state=SessionState.CONFIRMING, draft={"expiry_date": date(2030, 6, 22)})

        assert isinstance(session, ConfirmingSession)
        assert session.draft == {
            "category": Category.DISH,
            "name": "缶詰",
            "quantity": 3,
            "expiry_date": date(2030, 6, 22),
        }
        assert (await store.get(USER_ID)).draft == session.draft

    async def test_drops_fields_the_state_does_not_carry(self, store: SessionStore) -> None:
        session = await _advance(
            store,
            SessionState.ENTERING_QUANTITY,
            {"category": Category.SNACK, "name": "クッキー", "quantity": 2},
        )

        assert isinstance(session, EnteringQuantitySession)
        assert "quantity" not in session.draft

    async def test_refreshes_last_activity(self, store: SessionStore, clock: FakeClock) -> None:
        session = await _advance(store, SessionState.SELECTING_CATEGORY)
        clock.advance(minutes=20)

        session = await store.update(session, state=SessionState.ENTERING_NAME, draft={"category": Category.OTHER})

        assert session.last_activity == clock.now()

    async def test_overwrites_state(self, store: SessionStore) -> None:
        session = await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})

        session = await store.update(session, state=SessionState.SELECTING_CATEGORY)

        assert session.state == SessionState.SELECTING_CATEGORY
        assert session.draft == {}

    async def test_merges_onto_held_session_after_timeout(self, store: SessionStore, clock: FakeClock) -> None:
        """A turn that loaded a live session can still save it when the timeout passes mid-turn."""
        session = await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})
        clock.advance(minutes=29)
        held = await store.get(USER_ID)
        clock.advance(minutes=2)

        session = await store.update(held, state=SessionState.ENTERING_QUANTITY, draft={"name": "保存水"})

        assert isinstance(session, EnteringQuantitySession)
        assert session.draft == {"category": Category.WATER, "name": "保存水"}

    async def test_rejected_write_raises_store_error(self, clock: FakeClock) -> None:
        store = SessionStore(RejectingBackend(clock=clock.monotonic), timeout=timedelta(minutes=30), clock=clock.now)

        with pytest.raises(StoreError, match="Failed to write session"):
            await _advance(store, SessionState.SELECTING_CATEGORY)


@pytest.mark.unit
class TestReset:
    async def test_reset_returns_idle_and_clears_draft(self, store: SessionStore) -> None:
        await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})

        session = await store.reset(USER_ID)

        assert isinstance(session, IdleSession)
        assert isinstance(await store.get(USER_ID), IdleSession)

    async def test_restart_after_reset_has_no_stale_fields(self, store: SessionStore) -> None:
        await _advance(store, SessionState.ENTERING_QUANTITY, {"category": Category.DISH, "name": "a"})
        idle = await store.reset(USER_ID)

        session = await store.update(idle, state=SessionState.SELECTING_CATEGORY)

        assert session.draft == {}


@pytest.mark.unit
class TestExpiry:
    async def test_session_within_timeout_is_kept(self, store: SessionStore, clock: FakeClock) -> None:
        await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})
        clock.advance(minutes=29)

        session = await store.get(USER_ID)

        assert session.state == SessionState.ENTERING_NAME

    async def test_stale_session_is_idle(self, store: SessionStore, clock: FakeClock) -> None:
        await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})
        clock.advance(minutes=31)

        session = await store.get(USER_ID)

        assert isinstance(session, IdleSession)

    async def test_lazy_expiry_without_backend_eviction(self, clock: FakeClock) -> None:
        """A backend that never evicts still yields idle once the timeout has passed."""
        no_ttl_backend = InMemoryCache(clock=lambda: 0.0)
        store = SessionStore(no_ttl_backend, timeout=timedelta(minutes=30), clock=clock.now)
        await _advance(store, SessionState.SELECTING_CATEGORY)
        clock.advance(minutes=45)

        session = await store.get(USER_ID)

        assert isinstance(session, IdleSession)
        assert await no_ttl_backend.get(f"session:{USER_ID}") is None

    async def test_activity_extends_timeout(self, store: SessionStore, clock: FakeClock) -> None:
        session = await _advance(store, SessionState.ENTERING_NAME, {"category": Category.WATER})
        clock.advance(minutes=25)
        await store.update(session, state=SessionState.ENTERING_QUANTITY, draft={"name": "水"})
        clock.advance(minutes=25)

        session = await store.get(USER_ID)

        assert session.state == SessionState.ENTERING_QUANTITY

    async def test_unreadable_session_is_discarded(self, store: SessionStore, backend: InMemoryCache) -> None:
        await backend.set(f"session:{USER_ID}", "not json", 60)

        session = await store.get(USER_ID)

        assert isinstance(session, IdleSession)
        assert await backend.get(f"session:{USER_ID}") is None


@pytest.mark.unit
def test_health_reports_backend_status(store: SessionStore) -> None:
    assert store.health()["backend"] == "memory"
