from src.taskboard.domain.models.data_source import DataSource, SourceMode
from src.taskboard.domain.models.identity import Identity
from src.taskboard.domain.models.states import SessionState, TaskListState
from src.taskboard.domain.models.task import Task
from src.taskboard.domain.models.task_filter import TaskFilter
from src.taskboard.domain.models.task_sort import TaskSort
from src.taskboard.domain.models.task_status import TaskStatus
from src.taskboard.domain.models.timestamps import SERVER_TIMESTAMP, ServerTimestamp
from src.taskboard.domain.models.view_criteria import ViewCriteria

__all__ = [
    "Task",
    "TaskStatus",
    "TaskFilter",
    "TaskSort",
    "ViewCriteria",
    "DataSource",
    "SourceMode",
    "Identity",
    "TaskListState",
    "SessionState",
    "SERVER_TIMESTAMP",
    "ServerTimestamp",
]
