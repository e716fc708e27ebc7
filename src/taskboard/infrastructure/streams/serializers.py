from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from src.taskboard.domain.events.task_change_event import TaskChangeEvent

EVENT_FIELDS = ("event_id", "type", "owner_id", "task_id", "ts")


def encode_event(event: TaskChangeEvent) -> dict[str, str]:
    """Flatten an event into the string fields of a stream entry."""
    data = event.model_dump(mode="json")
    return {name: str(data[name]) for name in EVENT_FIELDS}


def decode_event(fields: dict[str, Any]) -> TaskChangeEvent:
    missing = [name for name in EVENT_FIELDS if name not in fields]
    if missing:
        raise ValueError(f"Change event is missing fields: {', '.join(missing)}")
    try:
        return TaskChangeEvent.model_validate({name: fields[name] for name in EVENT_FIELDS})
    except ValidationError as exc:
        raise ValueError("Invalid change event") from exc
