from pydantic import BaseModel, Field

from src.taskboard.domain.models.data_source import SourceMode
from src.taskboard.domain.models.identity import Identity
from src.taskboard.domain.models.task import Task
from src.taskboard.domain.models.task_filter import TaskFilter
from src.taskboard.domain.models.task_sort import TaskSort


class TaskListState(BaseModel):
    """Everything the presentation layer may read from the task list."""

    tasks: list[Task] = Field(default_factory=list, description="Derived task view.")
    loading: bool = Field(default=False, description="Whether a load is in flight.")
    error: str | None = Field(default=None, description="Last error message, if any.")
    filter: TaskFilter = Field(default=TaskFilter.ALL, description="Status filter.")
    sort: TaskSort | None = Field(default=None, description="Sort order, if any.")
    search: str = Field(default="", description="Title search text.")


class SessionState(BaseModel):
    mode: SourceMode = Field(description="Active data source mode.")
    identity: Identity | None = Field(default=None, description="Signed-in user.")
    auth_loading: bool = Field(
        default=False, description="Whether identity resolution is pending."
    )
    auth_error: str | None = Field(
        default=None, description="Last sign-in/sign-up failure message."
    )
    task_list: TaskListState = Field(description="Task list state.")
