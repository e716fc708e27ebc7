import pytest
from pydantic import ValidationError

from src.taskboard.domain.models import SERVER_TIMESTAMP, ServerTimestamp, Task, TaskFilter, TaskStatus


def test_task_title_is_stripped() -> None:
    task = Task(id="1", title="  Buy milk  ")

    assert task.title == "Buy milk"
    assert task.status is TaskStatus.TODO
    assert task.due_date is None


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_task_rejects_blank_title(title: str) -> None:
    with pytest.raises(ValidationError):
        Task(id="1", title=title)


def test_task_parses_iso_due_date() -> None:
    task = Task.model_validate({"id": "1", "title": "File taxes", "due_date": "2026-04-15"})

    assert task.due_date.isoformat() == "2026-04-15"


def test_filter_matches_status() -> None:
    assert TaskFilter.ALL.matches(TaskStatus.DONE)
    assert TaskFilter.DOING.matches(TaskStatus.DOING)
    assert not TaskFilter.DOING.matches(TaskStatus.TODO)


def test_server_timestamp_is_a_singleton() -> None:
    assert ServerTimestamp() is SERVER_TIMESTAMP
