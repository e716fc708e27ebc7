class TaskValidationError(ValueError):
    """Raised when a task is rejected before it reaches any repository."""


class RepositoryError(Exception):
    """Raised by repository adapters when the backend rejects or fails a request."""


class TaskNotFoundError(RepositoryError):
    """Raised when a task identifier does not exist for the owner."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id '{task_id}' was not found.")
        self.task_id = task_id


class TaskAccessDeniedError(RepositoryError):
    """Raised when a user attempts to touch a task they do not own."""

    def __init__(self, task_id: str, owner_id: str) -> None:
        super().__init__(f"User '{owner_id}' has no access to task '{task_id}'.")
        self.task_id = task_id
        self.owner_id = owner_id


class IdentityError(Exception):
    """Raised when sign-in, sign-up or sign-out is rejected by the identity provider."""
