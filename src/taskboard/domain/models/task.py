from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.taskboard.domain.models.task_status import TaskStatus


class Task(BaseModel):
    id: str = Field(description="Opaque task identifier, unique per session.")
    title: str = Field(description="Short, non-empty task title.")
    status: TaskStatus = Field(
        default=TaskStatus.TODO, description="Current workflow status."
    )
    due_date: date | None = Field(default=None, description="Optional due date.")

    model_config = ConfigDict(frozen=True)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Task title cannot be empty.")
        return stripped
