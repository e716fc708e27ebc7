import pytest

from src.taskboard.application.session import TrackerSession
from src.taskboard.domain.models import SourceMode, TaskStatus
from src.taskboard.infrastructure.identity_base import EMAIL_IN_USE, INVALID_CREDENTIALS
from src.taskboard.infrastructure.memory.repositories import InMemoryTaskRepository

from .fakes import settle


async def _start(session: TrackerSession) -> TrackerSession:
    await session.start()
    await session.projector.wait_loaded()
    return session


@pytest.mark.asyncio
async def test_start_loads_local_seed(session: TrackerSession) -> None:
    await _start(session)
    state = session.state()

    assert state.mode is SourceMode.LOCAL
    assert state.identity is None
    assert state.auth_loading is False
    assert len(state.task_list.tasks) == 3


@pytest.mark.asyncio
async def test_toggle_to_remote_without_identity_is_empty(session: TrackerSession) -> None:
    await _start(session)
    session.simulate_error()

    session.toggle_source()
    state = session.state()

    assert state.mode is SourceMode.REMOTE
    assert state.task_list.tasks == []
    assert state.task_list.loading is False
    assert state.task_list.error is None


@pytest.mark.asyncio
async def test_sign_up_in_remote_mode_subscribes_to_owner_tasks(
    session: TrackerSession, memory_repository: InMemoryTaskRepository
) -> None:
    await _start(session)
    session.set_mode(SourceMode.REMOTE)

    await session.sign_up("Ada@Example.com", "secret-pass")
    await session.projector.wait_loaded()
    state = session.state()

    assert state.identity is not None
    assert state.identity.email == "ada@example.com"
    assert session.source.owner_id == state.identity.uid
    assert memory_repository.subscriber_count(state.identity.uid) == 1

    await session.add_task("Remote chore")
    await settle()

    tasks = session.state().task_list.tasks
    assert [task.title for task in tasks] == ["Remote chore"]

    await session.update_status(tasks[0].id, TaskStatus.DONE)
    await settle()
    assert session.state().task_list.tasks[0].status is TaskStatus.DONE


@pytest.mark.asyncio
async def test_failed_sign_in_sets_auth_error(session: TrackerSession) -> None:
    await _start(session)
    session.set_mode(SourceMode.REMOTE)

    await session.sign_in("nobody@example.com", "whatever")

    state = session.state()
    assert state.identity is None
    assert state.auth_error == INVALID_CREDENTIALS


@pytest.mark.asyncio
async def test_sign_up_validation_messages(session: TrackerSession) -> None:
    await _start(session)

    await session.sign_up("not-an-email", "secret-pass")
    assert session.state().auth_error == "The email address is badly formatted."

    await session.sign_up("ada@example.com", "123")
    assert session.state().auth_error == "Password should be at least 6 characters."

    await session.sign_up("ada@example.com", "secret-pass")
    assert session.state().auth_error is None
    await session.sign_out()

    await session.sign_up("ada@example.com", "another-pass")
    assert session.state().auth_error == EMAIL_IN_USE


@pytest.mark.asyncio
async def test_sign_out_detaches_remote_tasks(
    session: TrackerSession, memory_repository: InMemoryTaskRepository
) -> None:
    await _start(session)
    session.set_mode(SourceMode.REMOTE)
    await session.sign_up("ada@example.com", "secret-pass")
    await session.projector.wait_loaded()
    uid = session.state().identity.uid
    await session.add_task("Private")
    await settle()

    await session.sign_out()

    state = session.state()
    assert state.identity is None
    assert state.task_list.tasks == []
    assert memory_repository.subscriber_count(uid) == 0


@pytest.mark.asyncio
async def test_identity_change_in_local_mode_keeps_tasks(session: TrackerSession) -> None:
    await _start(session)
    await session.add_task("Local only")

    await session.sign_up("ada@example.com", "secret-pass")

    titles = [task.title for task in session.state().task_list.tasks]
    assert titles[0] == "Local only"


@pytest.mark.asyncio
async def test_session_listeners_follow_task_changes(session: TrackerSession) -> None:
    received = []
    session.add_listener(received.append)
    await _start(session)

    session.set_search("coding")

    assert received[-1].task_list.search == "coding"
    assert [task.id for task in received[-1].task_list.tasks] == ["1"]


@pytest.mark.asyncio
async def test_close_detaches_everything(session: TrackerSession) -> None:
    received = []
    session.add_listener(received.append)
    await _start(session)
    session.close()
    count = len(received)

    session.projector.simulate_error()

    assert len(received) == count
