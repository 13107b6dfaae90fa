"""Audit event sinks.

Audit events are fire-and-forget: a sink failure is logged and never fails the
request that triggered it.
"""

from __future__ import annotations

import logging
from typing import Protocol

from redis.exceptions import RedisError

from academy.config import Settings
from shared.database.redis_client import RedisClient
from shared.events.schemas import AuditEvent

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    async def publish(self, event: AuditEvent) -> None: ...


class LogAuditSink:
    """Writes one JSON line per event to the ``academy.audit`` logger."""

    def __init__(self, logger_name: str = "academy.audit") -> None:
        self._logger = logging.getLogger(logger_name)

    async def publish(self, event: AuditEvent) -> None:
        self._logger.info(event.model_dump_json())


class RedisStreamAuditSink:
    """Appends events to a capped Redis stream for the external consumer."""

    def __init__(self, client: RedisClient, stream_key: str, maxlen: int = 10000) -> None:
        self._client = client
        self._stream_key = stream_key
        self._maxlen = maxlen

    async def publish(self, event: AuditEvent) -> None:
        await self._client.xadd(
            self._stream_key,
            {"type": event.type.value, "payload": event.model_dump_json()},
            maxlen=self._maxlen,
            approximate=True,
        )


def build_audit_sink(settings: Settings, redis_client: RedisClient | None = None) -> AuditSink:
    if settings.audit_sink == "redis":
        if redis_client is None:
            raise RuntimeError("AUDIT_SINK=redis requires a Redis client")
        return RedisStreamAuditSink(
            redis_client, settings.audit_stream_key, settings.audit_stream_maxlen
        )
    return LogAuditSink()


async def emit_audit(sink: AuditSink, event: AuditEvent) -> None:
    try:
        await sink.publish(event)
    except (RedisError, OSError):
        logger.warning(
            "Audit event %s dropped (course=%s session=%s)",
            event.type.value,
            event.course_id,
            event.session_id,
            exc_info=True,
        )
