from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import cast

import inject

from src.taskboard.application.projector import TaskListProjector
from src.taskboard.domain.exceptions import IdentityError
from src.taskboard.domain.models import (
    DataSource,
    Identity,
    SessionState,
    SourceMode,
    TaskFilter,
    TaskListState,
    TaskSort,
    TaskStatus,
)
from src.taskboard.domain.repositories import IdentityProvider

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionState], None]

DEFAULT_AUTH_ERROR = "An error occurred during authentication."


class TrackerSession:
    """
    Application shell around the projector: data source toggle and identity.

    The effective data source is local, or remote bound to the signed-in
    user's uid. Whenever that changes the projector is reloaded, which also
    clears any pending task error.
    """

    def __init__(
        self,
        identity: IdentityProvider | None = None,
        projector: TaskListProjector | None = None,
        *,
        use_remote: bool = False,
    ) -> None:
        self._identity = identity or cast(IdentityProvider, inject.instance(IdentityProvider))
        self._projector = projector or TaskListProjector()
        self._use_remote = use_remote
        self._auth_error: str | None = None
        self._listeners: list[SessionListener] = []
        self._detach_identity: Callable[[], None] | None = None
        self._detach_projector: Callable[[], None] | None = None
        self._loaded_source: DataSource | None = None

    @property
    def projector(self) -> TaskListProjector:
        return self._projector

    @property
    def mode(self) -> SourceMode:
        return SourceMode.REMOTE if self._use_remote else SourceMode.LOCAL

    @property
    def source(self) -> DataSource:
        if not self._use_remote:
            return DataSource.local()
        identity = self._identity.current
        return DataSource.remote(identity.uid if identity is not None else None)

    async def start(self) -> None:
        await self._identity.restore()
        self._detach_identity = self._identity.add_listener(self._on_identity_changed)
        self._detach_projector = self._projector.add_listener(self._on_task_list_changed)
        self._reload()

    def close(self) -> None:
        if self._detach_identity is not None:
            self._detach_identity()
            self._detach_identity = None
        if self._detach_projector is not None:
            self._detach_projector()
            self._detach_projector = None
        self._projector.close()

    def state(self) -> SessionState:
        return SessionState(
            mode=self.mode,
            identity=self._identity.current,
            auth_loading=self._identity.loading,
            auth_error=self._auth_error,
            task_list=self._projector.state(),
        )

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # -- data source -------------------------------------------------------

    def set_mode(self, mode: SourceMode) -> None:
        self._use_remote = mode is SourceMode.REMOTE
        logger.info("Data source mode changed", extra={"mode": self.mode.value})
        self._reload()

    def toggle_source(self) -> None:
        self.set_mode(SourceMode.LOCAL if self._use_remote else SourceMode.REMOTE)

    # -- identity ----------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> None:
        await self._authenticate(lambda: self._identity.sign_in(email, password))

    async def sign_up(self, email: str, password: str) -> None:
        await self._authenticate(lambda: self._identity.sign_up(email, password))

    async def sign_out(self) -> None:
        try:
            await self._identity.sign_out()
        except IdentityError as exc:
            self._auth_error = str(exc) or DEFAULT_AUTH_ERROR
            self._notify()

    async def _authenticate(self, attempt: Callable[[], Awaitable[Identity]]) -> None:
        self._auth_error = None
        try:
            identity = await attempt()
        except IdentityError as exc:
            logger.info("Authentication rejected", extra={"error": str(exc)})
            self._auth_error = str(exc) or DEFAULT_AUTH_ERROR
            self._notify()
            return
        except Exception:
            logger.exception("Identity provider failed")
            self._auth_error = DEFAULT_AUTH_ERROR
            self._notify()
            return
        logger.info("Signed in", extra={"uid": identity.uid})
        self._notify()

    # -- task operations ---------------------------------------------------

    async def add_task(self, title: str, due_date: date | None = None) -> None:
        await self._projector.add_task(title, due_date)

    async def update_status(self, task_id: str, status: TaskStatus) -> None:
        await self._projector.update_status(task_id, status)

    async def remove_task(self, task_id: str) -> None:
        await self._projector.remove_task(task_id)

    def simulate_error(self) -> None:
        self._projector.simulate_error()

    def clear_error(self) -> None:
        self._projector.clear_error()

    def set_filter(self, value: TaskFilter) -> None:
        self._projector.set_filter(value)

    def set_sort(self, value: TaskSort | None) -> None:
        self._projector.set_sort(value)

    def set_search(self, value: str) -> None:
        self._projector.set_search(value)

    # -- internals -----------------------------------------------------------

    def _reload(self) -> None:
        source = self.source
        self._loaded_source = source
        self._projector.load(source)

    def _on_identity_changed(self, identity: Identity | None) -> None:
        if self.source != self._loaded_source:
            self._reload()
        else:
            self._notify()

    def _on_task_list_changed(self, state: TaskListState) -> None:
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.state()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")
