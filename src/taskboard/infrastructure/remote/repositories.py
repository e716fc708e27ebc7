from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from datetime import date

from src.taskboard.domain.events.task_change_event import TaskChangeEvent
from src.taskboard.domain.models import Task, TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp
from src.taskboard.domain.repositories import ChangeFeed, TaskRepository, TaskStore

logger = logging.getLogger(__name__)


class SnapshotSubscription:
    """
    Full snapshots of one owner's tasks: one at subscribe time, then one per
    change event published after it.

    The feed cursor is taken before the first listing, so a change racing
    with the initial read still produces a follow-up snapshot.
    """

    def __init__(self, store: TaskStore, feed: ChangeFeed, owner_id: str) -> None:
        self._store = store
        self._feed = feed
        self._owner_id = owner_id
        self._events: AsyncIterator[TaskChangeEvent] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> SnapshotSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        if self._closed:
            raise StopAsyncIteration
        if self._events is None:
            after = await self._feed.cursor(self._owner_id)
            snapshot = await self._store.list_tasks(self._owner_id)
            self._events = aiter(self._feed.events(self._owner_id, after))
            return snapshot

        event = await anext(self._events)
        if self._closed:
            raise StopAsyncIteration
        logger.debug(
            "Change event received",
            extra={"owner_id": self._owner_id, "type": event.type.value, "task_id": event.task_id},
        )
        return await self._store.list_tasks(self._owner_id)

    def close(self) -> None:
        # The consumer task owning the blocked read is cancelled by its owner.
        self._closed = True


class RemoteTaskRepository(TaskRepository):
    """Task repository over a persistent store plus a change feed."""

    def __init__(self, store: TaskStore, feed: ChangeFeed) -> None:
        self._store = store
        self._feed = feed

    def subscribe(self, owner_id: str) -> SnapshotSubscription:
        return SnapshotSubscription(self._store, self._feed, owner_id)

    async def create(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: ServerTimestamp,
    ) -> str:
        task_id = await self._store.insert(
            owner_id,
            title=title,
            status=status,
            due_date=due_date,
            created_at=created_at,
        )
        await self._announce(TaskChangeEvent.created(owner_id, task_id))
        return task_id

    async def update_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        await self._store.set_status(owner_id, task_id, status)
        await self._announce(TaskChangeEvent.status_updated(owner_id, task_id))

    async def remove(self, owner_id: str, task_id: str) -> None:
        await self._store.delete(owner_id, task_id)
        await self._announce(TaskChangeEvent.removed(owner_id, task_id))

    async def _announce(self, event: TaskChangeEvent) -> None:
        # The write is already committed; publish failures are only logged.
        try:
            await self._feed.publish(event)
        except Exception:
            logger.exception(
                "Failed to publish change event",
                extra={"owner_id": event.owner_id, "task_id": event.task_id},
            )
