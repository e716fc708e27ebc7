from __future__ import annotations

import logging
from datetime import date, datetime
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.taskboard.domain.exceptions import (
    IdentityError,
    TaskAccessDeniedError,
    TaskNotFoundError,
)
from src.taskboard.domain.models.task import Task
from src.taskboard.domain.models.task_status import TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp
from src.taskboard.domain.repositories import TaskStore
from src.taskboard.infrastructure.identity_base import (
    EMAIL_IN_USE,
    BaseIdentityProvider,
    UserRecord,
)
from src.taskboard.infrastructure.postgres.mappers import OrmMapper
from src.taskboard.infrastructure.postgres.orm import PostgresOrm, TaskRow, UserRow
from src.taskboard.infrastructure.security import DEFAULT_ITERATIONS

logger = logging.getLogger(__name__)


class PostgresTaskStore(TaskStore):
    """Postgres-backed task rows using SQLAlchemy async sessions."""

    def __init__(self, orm: PostgresOrm) -> None:
        self._orm = orm

    async def insert(
        self,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: datetime | ServerTimestamp,
    ) -> str:
        """Persist a new task and return its id."""
        task_id = uuid4().hex
        row = OrmMapper.to_task_row(
            task_id,
            owner_id,
            title=title,
            status=status,
            due_date=due_date,
            created_at=created_at,
        )
        async with self._orm.session_factory() as session:
            async with session.begin():
                session.add(row)
        return task_id

    async def set_status(self, owner_id: str, task_id: str, status: TaskStatus) -> None:
        async with self._orm.session_factory() as session:
            async with session.begin():
                row = await self._owned_row(session, owner_id, task_id)
                row.status = status

    async def delete(self, owner_id: str, task_id: str) -> None:
        async with self._orm.session_factory() as session:
            async with session.begin():
                row = await self._owned_row(session, owner_id, task_id)
                await session.delete(row)

    async def list_tasks(self, owner_id: str) -> list[Task]:
        """All of the owner's tasks, newest first."""
        statement = (
            select(TaskRow)
            .where(TaskRow.owner_id == owner_id)
            .order_by(TaskRow.created_at.desc(), TaskRow.id.desc())
        )
        async with self._orm.session_factory() as session:
            result = await session.execute(statement)
            rows = result.scalars().all()
        return [OrmMapper.to_domain_task(row) for row in rows]

    @staticmethod
    async def _owned_row(session, owner_id: str, task_id: str) -> TaskRow:
        row = await session.get(TaskRow, task_id)
        if row is None:
            raise TaskNotFoundError(task_id)
        if row.owner_id != owner_id:
            raise TaskAccessDeniedError(task_id, owner_id)
        return row


class PostgresIdentityProvider(BaseIdentityProvider):
    """Email/password accounts stored in the ``users`` table."""

    def __init__(self, orm: PostgresOrm, *, hash_iterations: int = DEFAULT_ITERATIONS) -> None:
        super().__init__(hash_iterations=hash_iterations)
        self._orm = orm

    async def _find_user(self, email: str) -> UserRecord | None:
        async with self._orm.session_factory() as session:
            result = await session.execute(select(UserRow).where(UserRow.email == email))
            row = result.scalar_one_or_none()
        return OrmMapper.to_user_record(row) if row is not None else None

    async def _create_user(self, email: str, password_hash: str) -> UserRecord:
        row = OrmMapper.to_user_row(uuid4().hex, email, password_hash)
        try:
            async with self._orm.session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as exc:
            # Lost a race against a concurrent sign-up for the same email.
            raise IdentityError(EMAIL_IN_USE) from exc
        return OrmMapper.to_user_record(row)
