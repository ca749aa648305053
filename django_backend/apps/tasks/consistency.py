"""
Detection and repair of order drift.

Only relative order is meaningful, so a column can be renumbered densely
(0..N-1) at any time without changing what the board shows.
"""
import logging
from collections import Counter

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Max, Q

from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class ColumnDrift:
    """Summary of how far a column's order values are from 0..N-1"""

    def __init__(self, orders):
        orders = list(orders)
        counts = Counter(orders)
        self.size = len(orders)
        self.duplicates = sorted(o for o, n in counts.items() if n > 1)
        self.missing = sorted(set(range(self.size)) - set(counts))

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicates)

    @property
    def is_dense(self) -> bool:
        return not self.duplicates and not self.missing

    def __repr__(self):
        return f"ColumnDrift(size={self.size}, duplicates={self.duplicates}, missing={self.missing})"


def find_drift(project_id, status) -> ColumnDrift:
    orders = Task.objects.in_column(project_id, status).values_list("order", flat=True)
    return ColumnDrift(orders)


def check_column(project_id, status, orders):
    """
    Read-side guard. Gaps are tolerated silently; duplicate orders are logged
    and, when enabled, a renumber of the column is queued after commit.
    """
    drift = ColumnDrift(orders)
    if not drift.has_duplicates:
        return drift

    logger.warning(
        "Duplicate order values %s in column project=%s status=%s",
        drift.duplicates, project_id, status,
    )
    if getattr(settings, "BOARD_REPAIR_DRIFT_ON_READ", False):
        transaction.on_commit(lambda: queue_renumber(project_id, status))
    return drift


def queue_renumber(project_id, status):
    """
    Hand a column to the Celery renumber job. Reads must not fail on drift,
    so a broker error is logged and the nightly repair picks the column up.
    """
    from .celery_tasks import renumber_column_task

    try:
        renumber_column_task.delay(project_id, status)
    except Exception:
        logger.warning(
            "Could not queue renumber of column project=%s status=%s",
            project_id, status, exc_info=True,
        )
        return False
    return True


def renumber_column(project_id, status) -> int:
    """
    Rewrite a column's orders to 0..N-1 keeping its current display order.

    Returns the number of tasks whose order changed.
    """
    from .columns import COLUMN_ORDERING
    from .store import atomic_write, lock_projects

    with atomic_write():
        lock_projects(project_id)
        tasks = list(
            Task.objects.in_column(project_id, status)
            .order_by(*COLUMN_ORDERING)
            .only("pk", "order")
        )
        changed = []
        for index, task in enumerate(tasks):
            if task.order != index:
                task.order = index
                changed.append(task)
        if changed:
            Task.objects.bulk_update(changed, ["order"])

    if changed:
        logger.info(
            "Renumbered %d task(s) in column project=%s status=%s",
            len(changed), project_id, status,
        )
    return len(changed)


def renumber_project(project_id):
    """Renumber every column of a project. Returns {status: changed}."""
    return {status: renumber_column(project_id, status) for status in TaskStatus.values}


def drifted_columns():
    """(project_id, status) pairs whose orders are not exactly 0..N-1."""
    rows = (
        Task.objects.values("project_id", "status")
        .annotate(
            size=Count("id"),
            distinct_orders=Count("order", distinct=True),
            top=Max("order"),
        )
        .filter(Q(distinct_orders__lt=F("size")) | ~Q(top=F("size") - 1))
        .order_by("project_id", "status")
    )
    return [(row["project_id"], row["status"]) for row in rows]
