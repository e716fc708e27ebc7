from src.taskboard.domain.models import Task, TaskStatus

# Shown in local mode after the simulated load delay.
MOCK_INITIAL_TASKS: tuple[Task, ...] = (
    Task(id="1", title="Read the coding assignment brief", status=TaskStatus.TODO),
    Task(id="2", title="Implement the basic todo features", status=TaskStatus.DOING),
    Task(id="3", title="Wire up the cloud store and auth", status=TaskStatus.DONE),
)
