"""
Audit trail for registry mutations.

Hot registration runs administrator-supplied code with full process
privileges, so every registration and removal is recorded. Events go to a
Redis list when one is configured and always to the log.

Design Principles:
- Graceful degradation: a failing audit sink never fails the operation
- Bounded: the Redis list is trimmed to the configured maximum
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any, Dict, Optional

import redis.asyncio as redis

from ...config.provider import AuditConfig

logger = logging.getLogger("blockapi.audit")


class AuditLog:
    """Records registry events, optionally persisting them in Redis."""

    def __init__(self, redis_client=None, list_key: str = "registry:audit", max_entries: int = 10000):
        """
        Initialize audit log.

        Args:
            redis_client: Async Redis client, or None for log-only auditing
            list_key: Redis list receiving the events
            max_entries: Number of most recent events kept
        """
        self.redis = redis_client
        self.list_key = list_key
        self.max_entries = max_entries

    async def record(self, event_type: str, data: Dict[str, Any], request_id: Optional[str] = None) -> None:
        """
        Record an event.

        Args:
            event_type: Type of registry event
            data: Event data
            request_id: Request that caused the event, if any
        """
        event = {
            "type": event_type,
            "data": data,
            "request_id": request_id,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        logger.info(f"Audit event {event_type}: {data}")

        if self.redis is None:
            return

        try:
            await self.redis.lpush(self.list_key, json.dumps(event))
            await self.redis.ltrim(self.list_key, 0, self.max_entries - 1)
        except Exception as e:
            logger.warning(f"Failed to store audit event {event_type}: {e}")

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()


def create_audit_log(config: AuditConfig) -> AuditLog:
    """Build the audit log, connecting to Redis when a URL is configured."""
    client = None
    if config.is_configured:
        client = redis.from_url(config.redis_url, encoding="utf-8", decode_responses=True)
        logger.info(f"Audit events will be stored in Redis list {config.list_key}")
    return AuditLog(client, list_key=config.list_key, max_entries=config.max_entries)
