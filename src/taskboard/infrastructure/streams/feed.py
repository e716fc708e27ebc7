from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from redis.asyncio import Redis

from src.taskboard.domain.events.task_change_event import TaskChangeEvent
from src.taskboard.domain.repositories import ChangeFeed
from src.taskboard.infrastructure.streams.serializers import decode_event, encode_event

logger = logging.getLogger(__name__)

# Stream id that sorts before every real entry.
STREAM_START = "0-0"


class StreamsChangeFeed(ChangeFeed):
    """Change events on one Redis stream per owner (``<prefix>:<owner_id>``)."""

    def __init__(
        self,
        redis: Redis,
        *,
        prefix: str = "tasks",
        block_ms: int = 5000,
        maxlen: int | None = 1000,
    ) -> None:
        self._redis = redis
        self._prefix = prefix
        self._block_ms = block_ms
        self._maxlen = maxlen

    def stream_for(self, owner_id: str) -> str:
        return f"{self._prefix}:{owner_id}"

    async def publish(self, event: TaskChangeEvent) -> None:
        await self._redis.xadd(
            self.stream_for(event.owner_id),
            encode_event(event),
            maxlen=self._maxlen,
            approximate=True,
        )

    async def cursor(self, owner_id: str) -> str:
        entries = await self._redis.xrevrange(self.stream_for(owner_id), count=1)
        if not entries:
            return STREAM_START
        entry_id, _fields = entries[0]
        return entry_id

    async def events(self, owner_id: str, after: str) -> AsyncIterator[TaskChangeEvent]:
        stream = self.stream_for(owner_id)
        last_id = after
        while True:
            response = await self._redis.xread(
                {stream: last_id}, count=10, block=self._block_ms
            )
            for _stream_name, entries in response or []:
                for entry_id, fields in entries:
                    last_id = entry_id
                    try:
                        event = decode_event(fields)
                    except ValueError:
                        logger.warning(
                            "Skipping malformed change event",
                            extra={"stream": stream, "entry_id": entry_id},
                        )
                        continue
                    yield event

    async def close(self) -> None:
        await self._redis.aclose()
