from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import date
from typing import cast
from uuid import uuid4

import inject

from src.setup.api_config import get_api_settings
from src.taskboard.application.projection import derive_view
from src.taskboard.application.seed import MOCK_INITIAL_TASKS
from src.taskboard.domain.exceptions import TaskValidationError
from src.taskboard.domain.models import (
    SERVER_TIMESTAMP,
    DataSource,
    SourceMode,
    Task,
    TaskFilter,
    TaskListState,
    TaskSort,
    TaskStatus,
    ViewCriteria,
)
from src.taskboard.domain.repositories import TaskRepository, TaskSubscription

logger = logging.getLogger(__name__)

StateListener = Callable[[TaskListState], None]

EMPTY_TITLE_MESSAGE = "Task title cannot be empty."
SIMULATED_ERROR_MESSAGE = "Simulated error triggered!"


def clean_title(title: str) -> str:
    trimmed = title.strip()
    if not trimmed:
        raise TaskValidationError(EMPTY_TITLE_MESSAGE)
    return trimmed


class TaskListProjector:
    """
    Owns the task collection of the active session and derives the view of it.

    Local mode applies mutations immediately. Remote mode only sends requests
    to the repository; the collection changes when the live subscription
    delivers the next snapshot. Collaborator failures end up in ``error`` and
    are never raised to the caller.
    """

    def __init__(
        self,
        repository: TaskRepository | None = None,
        *,
        seed: Iterable[Task] = MOCK_INITIAL_TASKS,
        local_load_delay: float | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository or cast(TaskRepository, inject.instance(TaskRepository))
        self._seed = tuple(seed)
        if local_load_delay is None:
            local_load_delay = get_api_settings().LOCAL_LOAD_DELAY_SEC
        self._local_load_delay = local_load_delay
        self._new_id = id_factory or (lambda: uuid4().hex)

        self._tasks: tuple[Task, ...] = ()
        self._criteria = ViewCriteria()
        self._loading = True
        self._error: str | None = None
        self._source = DataSource.local()

        # Bumped on every detach; background work compares it before writing.
        self._epoch = 0
        self._load_task: asyncio.Task[None] | None = None
        self._subscription: TaskSubscription | None = None
        self._loaded = asyncio.Event()
        self._listeners: list[StateListener] = []

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def criteria(self) -> ViewCriteria:
        return self._criteria

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def source(self) -> DataSource:
        return self._source

    def derive_view(self) -> list[Task]:
        return derive_view(self._tasks, self._criteria)

    def state(self) -> TaskListState:
        return TaskListState(
            tasks=self.derive_view(),
            loading=self._loading,
            error=self._error,
            filter=self._criteria.filter,
            sort=self._criteria.sort,
            search=self._criteria.search,
        )

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # -- loading ---------------------------------------------------------

    def load(self, source: DataSource) -> None:
        """
        Switch to ``source``, dropping whatever the previous source was doing.

        Must be called from a running event loop; the seed timer and the
        subscription consumer run as background tasks.
        """
        self._detach()
        self._source = source
        self._error = None
        epoch = self._epoch

        if source.mode is SourceMode.REMOTE and source.owner_id is None:
            self._tasks = ()
            self._set_loading(False)
            self._notify()
            return

        self._set_loading(True)
        if source.mode is SourceMode.REMOTE:
            owner_id = cast(str, source.owner_id)
            try:
                subscription = self._repository.subscribe(owner_id)
            except Exception as exc:
                logger.warning(
                    "Task subscription could not be opened",
                    extra={"owner_id": owner_id, "error": str(exc)},
                )
                self._error = f"Failed to load tasks: {exc}"
                self._set_loading(False)
                self._notify()
                return
            self._subscription = subscription
            self._load_task = asyncio.create_task(self._consume(subscription, epoch))
        else:
            self._load_task = asyncio.create_task(self._seed_after_delay(epoch))
        self._notify()

    async def wait_loaded(self) -> None:
        await self._loaded.wait()

    def close(self) -> None:
        self._detach()

    def _detach(self) -> None:
        self._epoch += 1
        if self._load_task is not None:
            self._load_task.cancel()
            self._load_task = None
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    async def _seed_after_delay(self, epoch: int) -> None:
        await asyncio.sleep(self._local_load_delay)
        if epoch != self._epoch:
            return
        self._tasks = self._seed
        self._set_loading(False)
        self._notify()

    async def _consume(self, subscription: TaskSubscription, epoch: int) -> None:
        try:
            async for snapshot in subscription:
                if epoch != self._epoch:
                    logger.debug("Dropped snapshot from a detached subscription")
                    return
                self._tasks = tuple(snapshot)
                self._set_loading(False)
                self._notify()
        except Exception as exc:
            if epoch != self._epoch:
                return
            logger.warning(
                "Task subscription failed",
                extra={"owner_id": self._source.owner_id, "error": str(exc)},
            )
            self._error = f"Failed to load tasks: {exc}"
            self._set_loading(False)
            self._notify()

    # -- mutations -------------------------------------------------------

    async def add_task(self, title: str, due_date: date | None = None) -> None:
        try:
            trimmed = clean_title(title)
        except TaskValidationError as exc:
            self._error = str(exc)
            self._notify()
            return

        owner_id = self._remote_owner()
        if owner_id is None:
            task = Task(id=self._unique_id(), title=trimmed, due_date=due_date)
            self._tasks = (task, *self._tasks)
            self._notify()
            return

        epoch = self._epoch
        try:
            await self._repository.create(
                owner_id,
                title=trimmed,
                status=TaskStatus.TODO,
                due_date=due_date,
                created_at=SERVER_TIMESTAMP,
            )
        except Exception as exc:
            self._report_failure("Failed to add task", exc, epoch)

    async def update_status(self, task_id: str, status: TaskStatus) -> None:
        if not self._has_task(task_id):
            return

        owner_id = self._remote_owner()
        if owner_id is None:
            self._tasks = tuple(
                task.model_copy(update={"status": status}) if task.id == task_id else task
                for task in self._tasks
            )
            self._notify()
            return

        epoch = self._epoch
        try:
            await self._repository.update_status(owner_id, task_id, status)
        except Exception as exc:
            self._report_failure("Failed to update task status", exc, epoch)

    async def remove_task(self, task_id: str) -> None:
        if not self._has_task(task_id):
            return

        owner_id = self._remote_owner()
        if owner_id is None:
            self._tasks = tuple(task for task in self._tasks if task.id != task_id)
            self._notify()
            return

        epoch = self._epoch
        try:
            await self._repository.remove(owner_id, task_id)
        except Exception as exc:
            self._report_failure("Failed to delete task", exc, epoch)

    # -- errors and criteria ---------------------------------------------

    def simulate_error(self) -> None:
        self._error = SIMULATED_ERROR_MESSAGE
        self._notify()

    def clear_error(self) -> None:
        self._error = None
        self._notify()

    def set_filter(self, value: TaskFilter) -> None:
        self._criteria = self._criteria.model_copy(update={"filter": value})
        self._notify()

    def set_sort(self, value: TaskSort | None) -> None:
        self._criteria = self._criteria.model_copy(update={"sort": value})
        self._notify()

    def set_search(self, value: str) -> None:
        self._criteria = self._criteria.model_copy(update={"search": value})
        self._notify()

    # -- helpers ---------------------------------------------------------

    def _remote_owner(self) -> str | None:
        if self._source.mode is SourceMode.REMOTE:
            return self._source.owner_id
        return None

    def _has_task(self, task_id: str) -> bool:
        return any(task.id == task_id for task in self._tasks)

    def _unique_id(self) -> str:
        taken = {task.id for task in self._tasks}
        task_id = self._new_id()
        while task_id in taken:
            task_id = self._new_id()
        return task_id

    def _set_loading(self, loading: bool) -> None:
        self._loading = loading
        if loading:
            self._loaded.clear()
        else:
            self._loaded.set()

    def _report_failure(self, prefix: str, exc: Exception, epoch: int) -> None:
        logger.warning(
            prefix,
            extra={"owner_id": self._source.owner_id, "error": str(exc)},
        )
        if epoch != self._epoch:
            # The source changed while the request was in flight.
            return
        self._error = f"{prefix}: {exc}"
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.state()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Task list listener failed")
