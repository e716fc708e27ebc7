from enum import Enum

from src.taskboard.domain.models.task_status import TaskStatus


class TaskFilter(str, Enum):
    ALL = "all"
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    def matches(self, status: TaskStatus) -> bool:
        return self is TaskFilter.ALL or self.value == status.value
