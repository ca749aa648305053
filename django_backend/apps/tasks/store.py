"""
Order store: the only code allowed to write ``Task.status`` / ``Task.order``.

Every column mutation is one of two primitives:

- ``shift_range`` moves a contiguous tail of a column by one slot in a single
  ``UPDATE ... SET order = order + delta`` statement.
- ``set_position`` pins one task to an absolute ``(status, order)``.

Both are idempotent given the same inputs against the same starting state and
must run inside ``atomic_write`` while the owning project rows are locked with
``lock_projects``.
"""
import logging
from contextlib import contextmanager

from django.db import OperationalError, transaction
from django.db.models import F, Max
from django.utils import timezone

from apps.projects.models import Project
from .exceptions import ConflictError, ProjectNotFound, TaskNotFound, is_write_conflict
from .models import Task

logger = logging.getLogger(__name__)


@contextmanager
def atomic_write():
    """
    Run a board write as one transaction.

    Write conflicts reported by the database surface as ``ConflictError``;
    everything else propagates unchanged. Either way the transaction is
    rolled back and no partial shift is persisted.
    """
    try:
        with transaction.atomic():
            yield
    except OperationalError as exc:
        if is_write_conflict(exc):
            logger.warning("Board write conflict, rolled back: %s", exc)
            raise ConflictError() from exc
        raise


def lock_projects(*project_ids):
    """
    Take row locks on the given projects, serialising every writer of their
    columns until the surrounding transaction ends.

    Locks are taken in primary key order so two writers touching the same
    pair of projects cannot deadlock.
    """
    wanted = sorted({pid for pid in project_ids if pid is not None})
    locked = list(
        Project.objects.select_for_update()
        .filter(pk__in=wanted)
        .order_by("pk")
        .values_list("pk", flat=True)
    )
    if len(locked) != len(wanted):
        raise ProjectNotFound()
    return locked


def lock_task(task_id, also_lock=()):
    """
    Lock a task, the project that owns it and any projects in ``also_lock``,
    returning the fresh task row.
    """
    try:
        project_id = Task.objects.values_list("project_id", flat=True).get(pk=task_id)
    except Task.DoesNotExist:
        raise TaskNotFound()

    lock_projects(project_id, *also_lock)

    try:
        task = Task.objects.select_for_update().get(pk=task_id)
    except Task.DoesNotExist:
        raise TaskNotFound()

    if task.project_id != project_id:
        # Moved to another project between the read and the lock
        raise ConflictError()
    return task


def shift_range(project_id, status, from_order, delta, exclude_task_id=None):
    """
    Add ``delta`` (+1 or -1) to the order of every task in the column whose
    order is ``>= from_order``, skipping ``exclude_task_id``.

    Returns the number of tasks shifted.
    """
    if delta not in (1, -1):
        raise ValueError(f"Column shifts move by one slot, got {delta}")

    qs = Task.objects.in_column(project_id, status).filter(order__gte=from_order)
    if exclude_task_id is not None:
        qs = qs.exclude(pk=exclude_task_id)
    return qs.update(order=F("order") + delta)


def set_position(task_id, status, order, project_id=None):
    """Assign an absolute (status, order) to one task, optionally re-homing it."""
    fields = {"status": status, "order": order, "updated_at": timezone.now()}
    if project_id is not None:
        fields["project_id"] = project_id
    updated = Task.objects.filter(pk=task_id).update(**fields)
    if not updated:
        raise TaskNotFound()
    return updated


def next_order(project_id, status, exclude_task_id=None):
    """First free slot at the end of a column."""
    qs = Task.objects.in_column(project_id, status)
    if exclude_task_id is not None:
        qs = qs.exclude(pk=exclude_task_id)
    top = qs.aggregate(top=Max("order"))["top"]
    return 0 if top is None else top + 1
