"""
Reorder engine: moves a task to a position in a (possibly different) column.

A move is a remove-then-insert on integer positions:

1. close the slot the task leaves in its source column (every task after
   the task's original order moves up by one),
2. open a slot at the destination order (every task at or after it moves
   down by one),
3. pin the task to the opened slot.

Both shifts exclude the moving task and are computed from the source order
captured before anything is written, so a move inside one column nets out to
a single shift of the tasks between the old and new position, and moving a
task onto its own position changes nothing. All three steps run in one
transaction while the project rows are locked; see ``apps.tasks.store``.
"""
import logging

from apps.notifications.delivery import notify_task_change
from . import store
from .audit import TaskSnapshot, TransitionAudit
from .exceptions import MoveValidationError
from .models import MAX_ORDER, TaskStatus

logger = logging.getLogger(__name__)


def validate_destination(destination_status, destination_order):
    """Reject a bad target before any row is touched."""
    errors = {}
    if destination_status not in TaskStatus.values:
        errors["newStatus"] = [f'"{destination_status}" is not a board column.']
    if isinstance(destination_order, bool) or not isinstance(destination_order, int):
        errors["newOrder"] = ["A whole number is required."]
    elif destination_order < 0:
        errors["newOrder"] = ["Ensure this value is greater than or equal to 0."]
    elif destination_order > MAX_ORDER:
        errors["newOrder"] = [f"Ensure this value is less than or equal to {MAX_ORDER}."]
    if errors:
        raise MoveValidationError(errors)


def relocate(task, destination_status, destination_order=None, project_id=None):
    """
    Shift-then-assign for a task already locked by the caller's transaction.

    ``destination_order=None`` appends to the end of the destination column.
    Orders past the end of the column are accepted as-is; the task simply
    sorts last.
    """
    source_project_id, source_status, source_order = task.project_id, task.status, task.order
    # A project override re-homes the task: the gap closes on the board it
    # leaves and the slot opens on the board it joins.
    target_project_id = project_id or source_project_id

    store.shift_range(
        source_project_id, source_status, source_order + 1, -1, exclude_task_id=task.pk
    )

    if destination_order is None:
        destination_order = store.next_order(
            target_project_id, destination_status, exclude_task_id=task.pk
        )
    store.shift_range(
        target_project_id, destination_status, destination_order, 1, exclude_task_id=task.pk
    )

    store.set_position(
        task.pk,
        destination_status,
        destination_order,
        project_id=target_project_id if target_project_id != source_project_id else None,
    )
    task.refresh_from_db()
    return task


def move_task(task_id, destination_status, destination_order, project_id=None,
              actor=None, audit=None):
    """
    Move a task to ``destination_order`` in the ``destination_status`` column.

    ``project_id`` places the task on another project's board; it defaults to
    the task's own project. Raises ``TaskNotFound`` / ``ProjectNotFound``,
    ``MoveValidationError`` or ``ConflictError``; on any error nothing is
    persisted. A status change is audited after the move has committed.
    """
    validate_destination(destination_status, destination_order)

    with store.atomic_write():
        task = store.lock_task(task_id, also_lock=(project_id,))
        before = TaskSnapshot.from_task(task)
        relocate(task, destination_status, destination_order, project_id)
        after = TaskSnapshot.from_task(task)

    logger.info(
        "Moved task %s from %s[%s] to %s[%s]",
        task.pk, before.status, before.order, after.status, after.order,
    )

    if audit is None:
        audit = TransitionAudit()
    audit.record_move(actor, before, after)
    notify_task_change(getattr(actor, "pk", actor), before, after)
    return task
