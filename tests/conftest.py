from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.taskboard.application.projector import TaskListProjector
from src.taskboard.application.session import TrackerSession
from src.taskboard.infrastructure.memory.repositories import (
    InMemoryIdentityProvider,
    InMemoryTaskRepository,
)
from src.taskboard.presentation.main import create_app

from .fakes import StubTaskRepository, settle


@pytest.fixture
def stub_repository() -> StubTaskRepository:
    return StubTaskRepository()


@pytest.fixture
def projector(stub_repository: StubTaskRepository) -> TaskListProjector:
    return TaskListProjector(stub_repository, local_load_delay=0)


@pytest.fixture
def memory_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider(hash_iterations=1)


@pytest.fixture
def session(
    memory_repository: InMemoryTaskRepository,
    identity_provider: InMemoryIdentityProvider,
) -> TrackerSession:
    projector = TaskListProjector(memory_repository, local_load_delay=0)
    return TrackerSession(identity_provider, projector)


@pytest.fixture
def api_client(session: TrackerSession):
    """FastAPI test client wired to an in-memory session."""
    app = create_app(session)
    with TestClient(app) as client:
        client.portal.call(session.projector.wait_loaded)
        client.portal.call(settle)
        yield client
