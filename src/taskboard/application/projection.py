from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache

from pyuca import Collator

from src.taskboard.domain.models import Task, TaskFilter, TaskSort, ViewCriteria


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loads the Unicode collation table; built once per process.
    return Collator()


def title_key(task: Task) -> tuple[tuple[int, ...], str]:
    """Unicode collation key for titles; the raw title breaks ties between case variants."""
    return _collator().sort_key(task.title.casefold()), task.title


def due_date_key(task: Task) -> str:
    """ISO date string, with an absent date sorting as the empty string."""
    return task.due_date.isoformat() if task.due_date is not None else ""


def derive_view(tasks: Iterable[Task], criteria: ViewCriteria) -> list[Task]:
    """
    Project the raw task collection onto the list shown to the user.

    Filter by status, then by case-insensitive title search, then sort.
    The input is never mutated and equal inputs always give equal output.
    """
    view = list(tasks)

    if criteria.filter is not TaskFilter.ALL:
        view = [task for task in view if criteria.filter.matches(task.status)]

    keyword = criteria.search.strip().casefold()
    if keyword:
        view = [task for task in view if keyword in task.title.casefold()]

    if criteria.sort is TaskSort.TITLE_ASC:
        view.sort(key=title_key)
    elif criteria.sort is TaskSort.TITLE_DESC:
        view.sort(key=title_key, reverse=True)
    elif criteria.sort is TaskSort.DUE_DATE_ASC:
        view.sort(key=due_date_key)
    elif criteria.sort is TaskSort.DUE_DATE_DESC:
        view.sort(key=due_date_key, reverse=True)
    return view
