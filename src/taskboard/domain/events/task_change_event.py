from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    CREATED = "created"
    STATUS_UPDATED = "status_updated"
    REMOVED = "removed"


class TaskChangeEvent(BaseModel):
    """Notification that an owner's task collection changed in the remote store."""

    event_id: str = Field(default_factory=lambda: uuid4().hex)
    type: ChangeType
    owner_id: str
    task_id: str
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def created(cls, owner_id: str, task_id: str) -> TaskChangeEvent:
        return cls(type=ChangeType.CREATED, owner_id=owner_id, task_id=task_id)

    @classmethod
    def status_updated(cls, owner_id: str, task_id: str) -> TaskChangeEvent:
        return cls(type=ChangeType.STATUS_UPDATED, owner_id=owner_id, task_id=task_id)

    @classmethod
    def removed(cls, owner_id: str, task_id: str) -> TaskChangeEvent:
        return cls(type=ChangeType.REMOVED, owner_id=owner_id, task_id=task_id)
