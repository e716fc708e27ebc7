from __future__ import annotations

from datetime import date, datetime

from src.taskboard.domain.models.task import Task
from src.taskboard.domain.models.task_status import TaskStatus
from src.taskboard.domain.models.timestamps import ServerTimestamp
from src.taskboard.infrastructure.identity_base import UserRecord
from src.taskboard.infrastructure.postgres.orm import TaskRow, UserRow


class OrmMapper:
    @staticmethod
    def to_task_row(
        task_id: str,
        owner_id: str,
        *,
        title: str,
        status: TaskStatus,
        due_date: date | None,
        created_at: datetime | ServerTimestamp,
    ) -> TaskRow:
        row = TaskRow(
            id=task_id,
            owner_id=owner_id,
            title=title,
            status=status,
            due_date=due_date,
        )
        # Left unset, the column's server default stamps the row.
        if not isinstance(created_at, ServerTimestamp):
            row.created_at = created_at
        return row

    @staticmethod
    def to_domain_task(row: TaskRow) -> Task:
        return Task(
            id=row.id,
            title=row.title,
            status=row.status,
            due_date=row.due_date,
        )

    @staticmethod
    def to_user_row(uid: str, email: str, password_hash: str) -> UserRow:
        return UserRow(id=uid, email=email, password_hash=password_hash)

    @staticmethod
    def to_user_record(row: UserRow) -> UserRecord:
        return UserRecord(uid=row.id, email=row.email, password_hash=row.password_hash)
