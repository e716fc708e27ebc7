from datetime import UTC, date, datetime

import pytest

from src.taskboard.domain.exceptions import (
    IdentityError,
    TaskAccessDeniedError,
    TaskNotFoundError,
)
from src.taskboard.domain.models import SERVER_TIMESTAMP, TaskStatus
from src.taskboard.infrastructure.postgres.orm import PostgresOrm
from src.taskboard.infrastructure.postgres.repositories import (
    PostgresIdentityProvider,
    PostgresTaskStore,
)


@pytest.fixture
def orm(tmp_path) -> PostgresOrm:
    return PostgresOrm(f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}")


@pytest.mark.asyncio
async def test_store_crud_and_ordering(orm: PostgresOrm) -> None:
    await orm.create_all()
    store = PostgresTaskStore(orm)

    older = await store.insert(
        "ada",
        title="older",
        status=TaskStatus.TODO,
        due_date=date(2026, 1, 2),
        created_at=datetime(2026, 1, 1, 9, 0, tzinfo=UTC),
    )
    newer = await store.insert(
        "ada",
        title="newer",
        status=TaskStatus.DOING,
        due_date=None,
        created_at=datetime(2026, 1, 1, 10, 0, tzinfo=UTC),
    )
    await store.insert(
        "bob",
        title="someone else",
        status=TaskStatus.TODO,
        due_date=None,
        created_at=SERVER_TIMESTAMP,
    )

    listed = await store.list_tasks("ada")
    assert [task.id for task in listed] == [newer, older]
    assert listed[1].due_date == date(2026, 1, 2)

    await store.set_status("ada", older, TaskStatus.DONE)
    await store.delete("ada", newer)

    remaining = await store.list_tasks("ada")
    assert [(task.id, task.status) for task in remaining] == [(older, TaskStatus.DONE)]
    assert [task.title for task in await store.list_tasks("bob")] == ["someone else"]
    await orm.dispose()


@pytest.mark.asyncio
async def test_store_enforces_existence_and_ownership(orm: PostgresOrm) -> None:
    await orm.create_all()
    store = PostgresTaskStore(orm)
    task_id = await store.insert(
        "ada",
        title="mine",
        status=TaskStatus.TODO,
        due_date=None,
        created_at=SERVER_TIMESTAMP,
    )

    with pytest.raises(TaskNotFoundError):
        await store.set_status("ada", "missing", TaskStatus.DONE)
    with pytest.raises(TaskAccessDeniedError):
        await store.delete("bob", task_id)
    await orm.dispose()


@pytest.mark.asyncio
async def test_identity_provider_persists_users(orm: PostgresOrm) -> None:
    await orm.create_all()
    provider = PostgresIdentityProvider(orm, hash_iterations=1)

    created = await provider.sign_up("ada@example.com", "secret-pass")
    await provider.sign_out()

    again = PostgresIdentityProvider(orm, hash_iterations=1)
    assert await again.sign_in("ada@example.com", "secret-pass") == created
    with pytest.raises(IdentityError):
        await again.sign_in("ada@example.com", "wrong-pass")
    with pytest.raises(IdentityError):
        await again.sign_up("ada@example.com", "secret-pass")
    await orm.dispose()
