from pydantic import BaseModel, Field

from src.taskboard.domain.models.task_filter import TaskFilter
from src.taskboard.domain.models.task_sort import TaskSort


class ViewCriteria(BaseModel):
    filter: TaskFilter = Field(default=TaskFilter.ALL, description="Status filter.")
    sort: TaskSort | None = Field(default=None, description="Sort order, if any.")
    search: str = Field(default="", description="Case-insensitive title search.")
