"""Tests for the Redis session backend wrapper."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from stockpile.core.redis_client import RedisClient


@pytest.fixture
def client() -> RedisClient:
    """Client with a configured URL and a mocked connection."""
    redis_client = RedisClient("redis://localhost:6379/0")
    redis_client._client = AsyncMock()
    return redis_client


@pytest.mark.unit
class TestDisabledClient:
    async def test_operations_are_no_ops(self) -> None:
        disabled = RedisClient("")

        assert disabled.is_available is False
        assert await disabled.get("session:U1") is None
        assert await disabled.set("session:U1", "{}", 60) is False
        assert await disabled.delete("session:U1") is False
        assert await disabled.ping() is False


@pytest.mark.unit
class TestEnabledClient:
    async def test_set_uses_setex(self, client: RedisClient) -> None:
        assert await client.set("session:U1", "{}", 1800) is True

        client._client.setex.assert_awaited_once_with("session:U1", 1800, "{}")

    async def test_get(self, client: RedisClient) -> None:
        client._client.get.return_value = '{"state": "idle"}'

        assert await client.get("session:U1") == '{"state": "idle"}'

    async def test_errors_are_reported_not_raised(self, client: RedisClient) -> None:
        """A Redis outage degrades to a miss or failed write."""
        client._client.get.side_effect = RedisConnectionError("down")
        client._client.setex.side_effect = RedisConnectionError("down")

        assert await client.get("session:U1") is None
        assert await client.set("session:U1", "{}", 60) is False
        assert client.get_health_status()["failure_count"] == 2
