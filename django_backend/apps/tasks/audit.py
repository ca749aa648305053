"""
Transition audit.

Turns before/after snapshots of a task into at most one activity record per
mutating request. Writing the record is best-effort: a failing sink is logged
and never undoes or rejects the task write that triggered it.
"""
import logging

from apps.activity.models import ActivityAction, TargetType
from apps.activity.sinks import ActivityEntry, AuditSinkFactory
from .models import TERMINAL_STATUS

logger = logging.getLogger(__name__)


class TaskSnapshot:
    """The audited fields of a task at one point in time"""

    def __init__(self, task_id, project_id, title, status, order, assignee_ids=()):
        self.task_id = task_id
        self.project_id = project_id
        self.title = title
        self.status = status
        self.order = order
        self.assignee_ids = frozenset(assignee_ids)

    @classmethod
    def from_task(cls, task):
        return cls(
            task_id=task.pk,
            project_id=task.project_id,
            title=task.title,
            status=task.status,
            order=task.order,
            assignee_ids=task.assignees.values_list("pk", flat=True),
        )

    def __repr__(self):
        return f"TaskSnapshot(task={self.task_id}, status={self.status!r}, order={self.order})"


def classify_transition(before: TaskSnapshot, after: TaskSnapshot) -> str:
    """
    Pick the single action describing a change.

    A status change wins over an assignee change made in the same request.
    """
    if before.status != after.status:
        if after.status == TERMINAL_STATUS:
            return ActivityAction.TASK_COMPLETED
        return ActivityAction.TASK_MOVED
    if before.assignee_ids != after.assignee_ids:
        return ActivityAction.TASK_ASSIGNED
    return ActivityAction.TASK_UPDATED


def build_entry(actor_id, before: TaskSnapshot, after: TaskSnapshot) -> ActivityEntry:
    action = classify_transition(before, after)

    if action in (ActivityAction.TASK_MOVED, ActivityAction.TASK_COMPLETED):
        details = f'Moved "{after.title}" from {before.status} to {after.status}'
        metadata = {"from": before.status, "to": after.status}
    elif action == ActivityAction.TASK_ASSIGNED:
        details = f'Updated assignees for "{after.title}"'
        metadata = {"assignee_ids": sorted(after.assignee_ids)}
    else:
        details = f'Updated task "{after.title}"'
        metadata = {}

    return ActivityEntry(
        actor_id=actor_id,
        action=action,
        target_type=TargetType.TASK,
        target_id=after.task_id,
        details=details,
        metadata=metadata,
    )


class TransitionAudit:
    def __init__(self, sink=None):
        self.sink = sink if sink is not None else AuditSinkFactory.get_sink()

    def record(self, actor, before: TaskSnapshot, after: TaskSnapshot):
        """Audit a general task edit: always exactly one record."""
        return self.emit(build_entry(_actor_id(actor), before, after))

    def record_move(self, actor, before: TaskSnapshot, after: TaskSnapshot):
        """
        Audit a drag-and-drop move. Reordering inside a column is not a
        transition and writes nothing.
        """
        if before.status == after.status:
            return None
        return self.emit(build_entry(_actor_id(actor), before, after))

    def emit(self, entry: ActivityEntry):
        """Write one record; returns it, or None when the sink failed."""
        try:
            self.sink.write(entry)
        except Exception:
            logger.exception("Audit write failed for %r, continuing without it", entry)
            return None
        return entry


def _actor_id(actor):
    if actor is None:
        return None
    return getattr(actor, "pk", actor)
