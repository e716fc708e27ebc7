from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from uuid import uuid4

from src.taskboard.domain.exceptions import TaskNotFoundError
from src.taskboard.domain.models import Task, TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp
from src.taskboard.domain.repositories import TaskRepository
from src.taskboard.infrastructure.identity_base import BaseIdentityProvider, UserRecord
from src.taskboard.infrastructure.security import DEFAULT_ITERATIONS

logger = logging.getLogger(__name__)

_Delivery = list[Task] | Exception | None


@dataclass
class _StoredTask:
    task: Task
    created_seq: int


class QueueSubscription:
    """Snapshot subscription fed through an asyncio queue."""

    def __init__(
        self,
        initial: list[Task],
        on_close: Callable[[QueueSubscription], None],
    ) -> None:
        self._queue: asyncio.Queue[_Delivery] = asyncio.Queue()
        self._queue.put_nowait(initial)
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, delivery: list[Task] | Exception) -> None:
        if not self._closed:
            self._queue.put_nowait(delivery)

    def __aiter__(self) -> QueueSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        if self._closed:
            raise StopAsyncIteration
        delivery = await self._queue.get()
        if delivery is None or self._closed:
            raise StopAsyncIteration
        if isinstance(delivery, Exception):
            raise delivery
        return delivery

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Wakes a consumer blocked on get().
        self._queue.put_nowait(None)
        self._on_close(self)


class InMemoryTaskRepository(TaskRepository):
    """
    Per-owner task collections held in process memory.

    Behaves like the remote store: creation order comes from a monotonic
    counter standing in for the server clock, and every mutation pushes a
    fresh snapshot to each open subscription of the owner.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, _StoredTask]] = {}
        self._subscribers: dict[str, list[QueueSubscription]] = {}
        self._clock = itertools.count(1)

    def snapshot(self, owner_id: str) -> list[Task]:
        rows = self._rows.get(owner_id, {}).values()
        ordered = sorted(rows, key=lambda row: row.created_seq, reverse=True)
        return [row.task for row in ordered]

    def subscribe(self, owner_id: str) -> QueueSubscription:
        def _detach(subscription: QueueSubscription) -> None:
            subscribers = self._subscribers.get(owner_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

        subscription = QueueSubscription(self.snapshot(owner_id), _detach)
        self._subscribers.setdefault(owner_id, []).append(subscription)
        return subscription

    def subscriber_count(self, owner_id: str) -> int:
        return len(self._subscribers.get(owner_id, []))

    def fail_subscriptions(self, owner_id: str, error: Exception) -> None:
        """Deliver ``error`` instead of a snapshot to every open subscription."""
        for subscription in list(self._subscribers.get(owner_id, [])):
            subscription.push(error)

    async def create(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: ServerTimestamp,
    ) -> str:
        task = Task(id=uuid4().hex, title=title, status=status, due_date=due_date)
        rows = self._rows.setdefault(owner_id, {})
        rows[task.id] = _StoredTask(task=task, created_seq=next(self._clock))
        self._publish(owner_id)
        return task.id

    async def update_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        stored = self._require(owner_id, task_id)
        stored.task = stored.task.model_copy(update={"status": status})
        self._publish(owner_id)

    async def remove(self, owner_id: str, task_id: str) -> None:
        self._require(owner_id, task_id)
        del self._rows[owner_id][task_id]
        self._publish(owner_id)

    def _require(self, owner_id: str, task_id: str) -> _StoredTask:
        stored = self._rows.get(owner_id, {}).get(task_id)
        if stored is None:
            raise TaskNotFoundError(task_id)
        return stored

    def _publish(self, owner_id: str) -> None:
        snapshot = self.snapshot(owner_id)
        subscribers = self._subscribers.get(owner_id, [])
        logger.debug(
            "Publishing task snapshot",
            extra={"owner_id": owner_id, "size": len(snapshot), "subscribers": len(subscribers)},
        )
        for subscription in list(subscribers):
            subscription.push(list(snapshot))


class InMemoryIdentityProvider(BaseIdentityProvider):
    """Email/password accounts kept in process memory."""

    def __init__(self, *, hash_iterations: int = DEFAULT_ITERATIONS) -> None:
        super().__init__(hash_iterations=hash_iterations)
        self._users: dict[str, UserRecord] = {}

    async def _find_user(self, email: str) -> UserRecord | None:
        return self._users.get(email)

    async def _create_user(self, email: str, password_hash: str) -> UserRecord:
        record = UserRecord(uid=uuid4().hex, email=email, password_hash=password_hash)
        self._users[email] = record
        return record
