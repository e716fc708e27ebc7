from datetime import date

from pydantic import BaseModel, Field

from src.taskboard.domain.models import SourceMode, TaskFilter, TaskSort, TaskStatus


class AddTaskRequest(BaseModel):
    title: str = Field(description="Task title; blank titles are reported in `error`.")
    due_date: date | None = Field(default=None, description="Optional due date.")


class UpdateStatusRequest(BaseModel):
    status: TaskStatus = Field(description="New task status.")


class ViewCriteriaRequest(BaseModel):
    """Partial update of the view criteria; omitted fields stay unchanged."""

    filter: TaskFilter | None = Field(default=None, description="Status filter.")
    sort: TaskSort | None = Field(
        default=None, description="Sort order. Send null explicitly to clear it."
    )
    search: str | None = Field(default=None, description="Title search text.")


class SourceRequest(BaseModel):
    mode: SourceMode = Field(description="Data source mode to switch to.")


class CredentialsRequest(BaseModel):
    email: str = Field(description="Account email.")
    password: str = Field(description="Account password.")
