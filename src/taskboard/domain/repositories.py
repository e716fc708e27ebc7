from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import date, datetime
from typing import Protocol

from src.taskboard.domain.events.task_change_event import TaskChangeEvent
from src.taskboard.domain.models.identity import Identity
from src.taskboard.domain.models.task import Task
from src.taskboard.domain.models.task_status import TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp

IdentityListener = Callable[[Identity | None], None]


class TaskSubscription(Protocol):
    """Live stream of full task snapshots for one owner."""

    def __aiter__(self) -> AsyncIterator[list[Task]]:
        """Iterate over snapshots, newest creation time first."""

    async def __anext__(self) -> list[Task]:
        """Wait for the next snapshot."""

    def close(self) -> None:
        """Detach from the backend. Never raises; safe to call twice."""


class TaskRepository(Protocol):
    """Repository contract for the authenticated remote task store."""

    def subscribe(self, owner_id: str) -> TaskSubscription:
        """Open a live snapshot subscription ordered by creation time descending."""

    async def create(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: ServerTimestamp,
    ) -> str:
        """Create a task and return the id assigned by the store."""

    async def update_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        """Replace the status of an existing task."""

    async def remove(self, owner_id: str, task_id: str) -> None:
        """Delete a task."""


class TaskStore(Protocol):
    """Persistence side of the remote repository."""

    async def insert(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: datetime | ServerTimestamp,
    ) -> str:
        """Persist a new task row and return its id."""

    async def set_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        """Update a task's status, enforcing ownership."""

    async def delete(self, owner_id: str, task_id: str) -> None:
        """Delete a task, enforcing ownership."""

    async def list_tasks(self, owner_id: str) -> list[Task]:
        """Return all of an owner's tasks, newest creation time first."""


class ChangeFeed(Protocol):
    """Change notification channel of the remote repository."""

    async def publish(self, event: TaskChangeEvent) -> None:
        """Announce a change to every subscriber of the event's owner."""

    async def cursor(self, owner_id: str) -> str:
        """Return a position such that later events are yielded by ``events``."""

    def events(self, owner_id: str, after: str) -> AsyncIterator[TaskChangeEvent]:
        """Yield the owner's change events published after ``after``."""


class IdentityProvider(Protocol):
    """Contract of the managed authentication provider."""

    @property
    def current(self) -> Identity | None:
        """Currently signed-in identity, if any."""

    @property
    def loading(self) -> bool:
        """Whether the provider is still resolving the persisted identity."""

    async def restore(self) -> Identity | None:
        """Resolve any persisted identity and clear the loading flag."""

    async def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate an existing user."""

    async def sign_up(self, email: str, password: str) -> Identity:
        """Register a new user and sign them in."""

    async def sign_out(self) -> None:
        """Forget the current identity."""

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        """Call ``listener`` on every identity change; return a detach callable."""
