import asyncio

import pytest

from src.taskboard.domain.events.task_change_event import TaskChangeEvent
from src.taskboard.infrastructure.streams.feed import STREAM_START, StreamsChangeFeed


class FakeStreamsRedis:
    """The handful of stream commands the feed issues, backed by lists."""

    def __init__(self) -> None:
        self.streams: dict[str, list[tuple[str, dict[str, str]]]] = {}
        self.closed = False

    async def xadd(self, name, fields, maxlen=None, approximate=True):
        entries = self.streams.setdefault(name, [])
        entry_id = f"{len(entries) + 1}-0"
        entries.append((entry_id, dict(fields)))
        return entry_id

    async def xrevrange(self, name, count=None):
        entries = list(reversed(self.streams.get(name, [])))
        return entries[:count] if count else entries

    async def xread(self, streams, count=None, block=None):
        response = []
        for name, last_id in streams.items():
            last = int(last_id.split("-")[0])
            newer = [
                entry for entry in self.streams.get(name, [])
                if int(entry[0].split("-")[0]) > last
            ]
            if newer:
                response.append((name, newer[:count]))
        if not response:
            await asyncio.sleep(0)
        return response

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_publish_appends_to_owner_stream() -> None:
    redis = FakeStreamsRedis()
    feed = StreamsChangeFeed(redis, prefix="board")

    assert await feed.cursor("ada") == STREAM_START
    await feed.publish(TaskChangeEvent.created("ada", "task-1"))

    assert feed.stream_for("ada") == "board:ada"
    assert len(redis.streams["board:ada"]) == 1
    assert await feed.cursor("ada") == "1-0"


@pytest.mark.asyncio
async def test_events_after_cursor_skip_malformed_entries() -> None:
    redis = FakeStreamsRedis()
    feed = StreamsChangeFeed(redis)
    await feed.publish(TaskChangeEvent.created("ada", "old"))
    after = await feed.cursor("ada")

    await redis.xadd(feed.stream_for("ada"), {"type": "garbage"})
    fresh = TaskChangeEvent.removed("ada", "task-2")
    await feed.publish(fresh)

    events = feed.events("ada", after)
    received = await asyncio.wait_for(anext(events), timeout=1)
    await events.aclose()

    assert received == fresh


@pytest.mark.asyncio
async def test_close_releases_connection() -> None:
    redis = FakeStreamsRedis()

    await StreamsChangeFeed(redis).close()

    assert redis.closed is True
