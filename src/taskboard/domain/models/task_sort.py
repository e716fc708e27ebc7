from enum import Enum


class TaskSort(str, Enum):
    """Sort orders for the task view. ``None`` stands for "keep fetch order"."""

    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    DUE_DATE_ASC = "due_date_asc"
    DUE_DATE_DESC = "due_date_desc"
