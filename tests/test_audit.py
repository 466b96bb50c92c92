"""
Unit tests for the registry audit trail.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from blockapi.config.provider import AuditConfig
from blockapi.modules.audit import AuditLog, create_audit_log


class TestAuditLog:
    """Test event recording."""

    @pytest.mark.asyncio
    async def test_event_pushed_and_trimmed(self, mock_redis):
        audit = AuditLog(mock_redis, list_key="audit:test", max_entries=50)

        await audit.record("endpoint_removed", {"opcode": "ping"}, request_id="req-7")

        key, payload = mock_redis.lpush.call_args[0]
        event = json.loads(payload)
        assert key == "audit:test"
        assert event["type"] == "endpoint_removed"
        assert event["data"] == {"opcode": "ping"}
        assert event["request_id"] == "req-7"
        assert "timestamp" in event
        mock_redis.ltrim.assert_awaited_once_with("audit:test", 0, 49)

    @pytest.mark.asyncio
    async def test_redis_failure_does_not_raise(self, mock_redis):
        mock_redis.lpush.side_effect = ConnectionError("redis down")
        audit = AuditLog(mock_redis)

        with patch("blockapi.modules.audit.audit.logger") as logger:
            await audit.record("endpoint_registered", {"opcode": "ping"})

        logger.warning.assert_called_once()
        assert "redis down" in logger.warning.call_args[0][0]

    @pytest.mark.asyncio
    async def test_log_only_mode(self):
        audit = AuditLog(None)

        with patch("blockapi.modules.audit.audit.logger") as logger:
            await audit.record("endpoint_registered", {"opcode": "ping"})

        logger.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_close(self, mock_redis):
        await AuditLog(mock_redis).close()

        mock_redis.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_redis(self):
        await AuditLog(None).close()


class TestCreateAuditLog:
    """Test construction from configuration."""

    def test_without_redis_url(self):
        audit = create_audit_log(AuditConfig(redis_url=None))

        assert audit.redis is None

    def test_with_redis_url(self):
        client = MagicMock()
        client.aclose = AsyncMock()

        with patch("blockapi.modules.audit.audit.redis.from_url", return_value=client) as from_url:
            audit = create_audit_log(
                AuditConfig(redis_url="redis://localhost:6379/0", list_key="k", max_entries=5)
            )

        from_url.assert_called_once_with(
            "redis://localhost:6379/0", encoding="utf-8", decode_responses=True
        )
        assert audit.redis is client
        assert audit.list_key == "k"
        assert audit.max_entries == 5
