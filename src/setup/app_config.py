import logging
from collections.abc import Awaitable, Callable

import inject

from src.setup.api_config import ApiSettings, get_api_settings
from src.setup.db_config import get_database_settings
from src.setup.stream_config import build_change_feed
from src.taskboard.application.projector import TaskListProjector
from src.taskboard.application.session import TrackerSession
from src.taskboard.domain.repositories import IdentityProvider, TaskRepository
from src.taskboard.infrastructure.memory.repositories import (
    InMemoryIdentityProvider,
    InMemoryTaskRepository,
)
from src.taskboard.infrastructure.postgres.orm import PostgresOrm
from src.taskboard.infrastructure.postgres.repositories import (
    PostgresIdentityProvider,
    PostgresTaskStore,
)
from src.taskboard.infrastructure.remote.repositories import RemoteTaskRepository

logger = logging.getLogger(__name__)

# Connection pools opened while binding; closed by release_resources().
_closers: list[Callable[[], Awaitable[None]]] = []


def _bind_memory(binder: inject.Binder) -> None:
    binder.bind(TaskRepository, InMemoryTaskRepository())
    binder.bind(IdentityProvider, InMemoryIdentityProvider())


def _bind_postgres(binder: inject.Binder) -> None:
    db_settings = get_database_settings()
    orm = PostgresOrm(db_settings.DATABASE_URL, echo=db_settings.DATABASE_ECHO)
    feed = build_change_feed()
    _closers.extend([orm.dispose, feed.close])
    binder.bind(PostgresOrm, orm)
    binder.bind(TaskRepository, RemoteTaskRepository(PostgresTaskStore(orm), feed))
    binder.bind(IdentityProvider, PostgresIdentityProvider(orm))


def configure_di(settings: ApiSettings | None = None) -> None:
    """Bind repositories and the session for the configured backend. Idempotent."""
    if inject.is_configured():
        return
    if settings is None:
        settings = get_api_settings()

    def _config(binder: inject.Binder) -> None:
        if settings.BACKEND == "postgres":
            _bind_postgres(binder)
        else:
            _bind_memory(binder)
        binder.bind_to_constructor(TrackerSession, lambda: _build_session(settings))

    inject.configure(_config)
    logger.info("Dependency injection configured", extra={"backend": settings.BACKEND})


def _build_session(settings: ApiSettings) -> TrackerSession:
    projector = TaskListProjector(local_load_delay=settings.LOCAL_LOAD_DELAY_SEC)
    return TrackerSession(projector=projector)


async def release_resources() -> None:
    while _closers:
        close = _closers.pop()
        try:
            await close()
        except Exception:
            logger.exception("Failed to release backend resource")
