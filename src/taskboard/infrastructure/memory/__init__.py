from src.taskboard.infrastructure.memory.repositories import (
    InMemoryIdentityProvider,
    InMemoryTaskRepository,
    QueueSubscription,
)

__all__ = [
    "InMemoryTaskRepository",
    "InMemoryIdentityProvider",
    "QueueSubscription",
]
