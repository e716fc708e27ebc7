from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import date, datetime

from src.taskboard.domain.events.task_change_event import TaskChangeEvent
from src.taskboard.domain.models import Task, TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp
from src.taskboard.domain.repositories import ChangeFeed, TaskRepository, TaskStore


class StubSubscription:
    """Subscription whose deliveries are pushed by the test."""

    def __init__(self, owner_id: str) -> None:
        self.owner_id = owner_id
        self.closed = False
        self._queue: asyncio.Queue[list[Task] | Exception] = asyncio.Queue()

    def deliver(self, tasks: list[Task]) -> None:
        self._queue.put_nowait(list(tasks))

    def fail(self, error: Exception) -> None:
        self._queue.put_nowait(error)

    def __aiter__(self) -> StubSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        delivery = await self._queue.get()
        if isinstance(delivery, Exception):
            raise delivery
        return delivery

    def close(self) -> None:
        self.closed = True


class StubTaskRepository(TaskRepository):
    """Records every request; set ``error`` to make mutations fail."""

    def __init__(self) -> None:
        self.subscriptions: list[StubSubscription] = []
        self.created: list[dict[str, object]] = []
        self.status_updates: list[tuple[str, str, TaskStatus]] = []
        self.removed: list[tuple[str, str]] = []
        self.error: Exception | None = None

    @property
    def latest(self) -> StubSubscription:
        return self.subscriptions[-1]

    def subscribe(self, owner_id: str) -> StubSubscription:
        subscription = StubSubscription(owner_id)
        self.subscriptions.append(subscription)
        return subscription

    async def create(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: ServerTimestamp,
    ) -> str:
        if self.error is not None:
            raise self.error
        self.created.append(
            {
                "owner_id": owner_id,
                "title": title,
                "status": status,
                "due_date": due_date,
                "created_at": created_at,
            }
        )
        return f"remote-{len(self.created)}"

    async def update_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        if self.error is not None:
            raise self.error
        self.status_updates.append((owner_id, task_id, status))

    async def remove(self, owner_id: str, task_id: str) -> None:
        if self.error is not None:
            raise self.error
        self.removed.append((owner_id, task_id))


async def settle(rounds: int = 5) -> None:
    """Let background tasks scheduled on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeTaskStore(TaskStore):
    """List-backed store; insertion order stands in for the server clock."""

    def __init__(self) -> None:
        self.rows: list[Task] = []
        self.list_calls = 0

    async def insert(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: datetime | ServerTimestamp,
    ) -> str:
        task_id = f"{owner_id}-{len(self.rows) + 1}"
        self.rows.append(Task(id=task_id, title=title, status=status, due_date=due_date))
        return task_id

    async def set_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        self.rows = [
            row.model_copy(update={"status": status}) if row.id == task_id else row
            for row in self.rows
        ]

    async def delete(self, owner_id: str, task_id: str) -> None:
        self.rows = [row for row in self.rows if row.id != task_id]

    async def list_tasks(self, owner_id: str) -> list[Task]:
        self.list_calls += 1
        return [row for row in reversed(self.rows) if row.id.startswith(f"{owner_id}-")]


class FakeChangeFeed(ChangeFeed):
    """Change feed over in-process lists; cursors are list positions."""

    def __init__(self) -> None:
        self.published: dict[str, list[TaskChangeEvent]] = {}
        self.error: Exception | None = None
        self._condition = asyncio.Condition()

    async def publish(self, event: TaskChangeEvent) -> None:
        if self.error is not None:
            raise self.error
        async with self._condition:
            self.published.setdefault(event.owner_id, []).append(event)
            self._condition.notify_all()

    async def cursor(self, owner_id: str) -> str:
        return str(len(self.published.get(owner_id, [])))

    async def events(self, owner_id: str, after: str) -> AsyncIterator[TaskChangeEvent]:
        position = int(after)
        while True:
            async with self._condition:
                await self._condition.wait_for(
                    lambda: position < len(self.published.get(owner_id, []))
                )
                event = self.published[owner_id][position]
            position += 1
            yield event
