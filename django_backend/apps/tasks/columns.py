import logging
from collections import OrderedDict

from .consistency import check_column
from .exceptions import MoveValidationError
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)

# Newest first among tasks sharing an order value, then id, so a drifted
# column still renders the same way on every read.
COLUMN_ORDERING = ("order", "-created_at", "-id")


def validate_status(status):
    if status not in TaskStatus.values:
        raise MoveValidationError({"status": [f'"{status}" is not a board column.']})
    return status


def column_queryset(project_id, status):
    return (
        Task.objects.in_column(project_id, status)
        .select_related("created_by", "project")
        .prefetch_related("assignees", "subtasks")
        .order_by(*COLUMN_ORDERING)
    )


def list_column(project_id, status):
    """Tasks of one (project, status) column in display order."""
    validate_status(status)
    tasks = list(column_queryset(project_id, status))
    check_column(project_id, status, [t.order for t in tasks])
    return tasks


def board(project_id):
    """
    Whole board of a project: an ordered mapping of status to the column's
    tasks, columns in workflow order.
    """
    columns = OrderedDict((status, []) for status in TaskStatus.values)
    tasks = (
        Task.objects.filter(project_id=project_id)
        .select_related("created_by", "project")
        .prefetch_related("assignees", "subtasks")
        .order_by("status", *COLUMN_ORDERING)
    )
    for task in tasks:
        columns.setdefault(task.status, []).append(task)

    for status, column in columns.items():
        check_column(project_id, status, [t.order for t in column])
    return columns
