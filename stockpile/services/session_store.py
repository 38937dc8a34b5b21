"""Per-user registration session store.

Sessions live in a TTL key/value backend (Redis when REDIS_URL is set,
otherwise process memory). A session whose last activity is older than the
timeout is treated as idle on the next read, even if the backend has not
evicted the key yet.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from pydantic import ValidationError

from stockpile.core.cache_client import cache_client
from stockpile.core.config import Constants, settings
from stockpile.core.errors import StoreError
from stockpile.core.logging import span
from stockpile.core.redis_client import redis_client
from stockpile.domain.session import IdleSession, Session, SessionState, build_session, session_adapter


logger = logging.getLogger(__name__)


class SessionBackend(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool: ...

    async def delete(self, *keys: str) -> bool: ...

    def get_health_status(self) -> dict[str, Any]: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionStore:
    """Get-or-create, merge-update and reset of one session per user."""

    def __init__(
        self,
        backend: SessionBackend,
        *,
        timeout: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._backend = backend
        self._timeout = timeout or timedelta(minutes=settings.session_timeout_minutes)
        self._clock = clock

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    def _key(self, user_id: str) -> str:
        return f"{Constants.SESSION_KEY_PREFIX}:{user_id}"

    def _idle(self, user_id: str) -> IdleSession:
        return IdleSession(user_id=user_id, last_activity=self._clock())

    def _is_expired(self, session: Session) -> bool:
        return self._clock() - session.last_activity > self._timeout

    async def get(self, user_id: str) -> Session:
        """Return the user's current session, or a fresh idle one.

        A fresh session is not written to the backend until the first update.
        """
        with span("session_store.get"):
            raw = await self._backend.get(self._key(user_id))
            if raw is None:
                return self._idle(user_id)

            try:
                session = session_adapter.validate_json(raw)
            except ValidationError:
                logger.warning("Discarding unreadable session", extra={"user_id": user_id})
                await self._backend.delete(self._key(user_id))
                return self._idle(user_id)

            if self._is_expired(session):
                logger.info(
                    "Session expired",
                    extra={"user_id": user_id, "state": session.state, "last_activity": session.last_activity.isoformat()},
                )
                await self._backend.delete(self._key(user_id))
                return self._idle(user_id)

            return session

    async def update(self, session: Session, *, state: SessionState, draft: dict[str, Any] | None = None) -> Session:
        """Merge draft into the session's draft, move to state and refresh last activity.

        The merge starts from the session the caller holds, so a turn never
        re-reads a session that may have expired since it was loaded.

        Args:
            session: The session loaded at the start of the turn
            state: New state
            draft: Fields to add or overwrite; fields the new state does not carry are dropped

        Returns:
            The stored session

        Raises:
            StoreError: If the backend did not accept the write
        """
        with span("session_store.update"):
            user_id = session.user_id
            merged = {**session.draft, **(draft or {})}
            updated = build_session(user_id=user_id, state=state, last_activity=self._clock(), draft=merged)

            ttl_seconds = int(self._timeout.total_seconds())
            if not await self._backend.set(self._key(user_id), updated.model_dump_json(), ttl_seconds):
                logger.error("Failed to write session", extra={"user_id": user_id, "state": state})
                msg = f"Failed to write session for {user_id}"
                raise StoreError(msg)

            logger.debug("Session updated", extra={"user_id": user_id, "state": state})
            return updated

    async def reset(self, user_id: str) -> Session:
        """Clear the draft and return to idle."""
        with span("session_store.reset"):
            if not await self._backend.delete(self._key(user_id)):
                logger.warning("Failed to delete session", extra={"user_id": user_id})
            logger.debug("Session reset", extra={"user_id": user_id})
            return self._idle(user_id)

    def health(self) -> dict[str, Any]:
        """Health status of the session backend."""
        return self._backend.get_health_status()


def _default_backend() -> SessionBackend:
    if redis_client.is_available:
        return redis_client
    return cache_client


# Global session store instance
session_store = SessionStore(_default_backend())
