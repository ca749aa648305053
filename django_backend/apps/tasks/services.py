"""
Task write paths other than drag-and-drop.

Anything that changes a task's column goes through ``reorder.relocate`` so
plain status edits and drag-and-drop share the same shift primitive.
"""
import logging

from apps.activity.models import ActivityAction, TargetType
from apps.activity.sinks import ActivityEntry
from apps.notifications import delivery
from apps.notifications.models import NotificationType, RelatedType
from . import store
from .audit import TaskSnapshot, TransitionAudit
from .columns import validate_status
from .exceptions import SubtaskNotFound
from .models import Comment, Subtask, Task, TaskStatus
from .reorder import relocate

logger = logging.getLogger(__name__)


def _audit(audit):
    return audit if audit is not None else TransitionAudit()


def create_task(*, project, title, actor, status=TaskStatus.TODO, assignees=(),
                subtasks=(), audit=None, **fields):
    """Create a task at the end of its column."""
    validate_status(status)
    assignees = list(assignees)

    with store.atomic_write():
        store.lock_projects(project.pk)
        task = Task.objects.create(
            project=project,
            title=title,
            status=status,
            order=store.next_order(project.pk, status),
            created_by=actor,
            **fields,
        )
        if assignees:
            task.assignees.set(assignees)
        if subtasks:
            Subtask.objects.bulk_create(
                [Subtask(task=task, title=s["title"], completed=s.get("completed", False))
                 for s in subtasks]
            )

    audit = _audit(audit)
    actor_id = getattr(actor, "pk", None)
    audit.emit(ActivityEntry(
        actor_id=actor_id,
        action=ActivityAction.TASK_CREATED,
        target_type=TargetType.TASK,
        target_id=task.pk,
        details=f'Created task "{task.title}"',
        metadata={"project_id": project.pk},
    ))
    if assignees:
        audit.emit(ActivityEntry(
            actor_id=actor_id,
            action=ActivityAction.TASK_ASSIGNED,
            target_type=TargetType.TASK,
            target_id=task.pk,
            details=f'Assigned task "{task.title}"',
            metadata={"assignee_ids": sorted(u.pk for u in assignees)},
        ))
        delivery.queue_notification(
            [u.pk for u in assignees], NotificationType.TASK_ASSIGNED,
            f'You were assigned to "{task.title}"', RelatedType.TASK, task.pk,
            exclude_user_id=actor_id,
        )
    return task


def update_task(task, changes, actor, audit=None):
    """
    Apply a general edit. A status change appends the task to the end of its
    new column. Writes exactly one activity record.
    """
    changes = dict(changes)
    status = changes.pop("status", None)
    assignees = changes.pop("assignees", None)
    if status is not None:
        validate_status(status)

    with store.atomic_write():
        locked = store.lock_task(task.pk)
        before = TaskSnapshot.from_task(locked)

        if status is not None and status != locked.status:
            relocate(locked, status)

        if changes:
            for field, value in changes.items():
                setattr(locked, field, value)
            locked.save(update_fields=[*changes, "updated_at"])
        if assignees is not None:
            locked.assignees.set(assignees)

        after = TaskSnapshot.from_task(locked)

    _audit(audit).record(actor, before, after)
    delivery.notify_task_change(getattr(actor, "pk", None), before, after)
    return locked


def delete_task(task, actor, audit=None):
    """Delete a task and close the slot it leaves in its column."""
    with store.atomic_write():
        locked = store.lock_task(task.pk)
        task_id, title = locked.pk, locked.title
        project_id, status, order = locked.project_id, locked.status, locked.order
        locked.delete()
        store.shift_range(project_id, status, order + 1, -1)

    logger.info("Deleted task %s from %s[%s] of project %s", task_id, status, order, project_id)
    _audit(audit).emit(ActivityEntry(
        actor_id=getattr(actor, "pk", None),
        action=ActivityAction.TASK_DELETED,
        target_type=TargetType.TASK,
        target_id=task_id,
        details=f'Deleted task "{title}"',
        metadata={"project_id": project_id},
    ))
    return task_id


def add_subtask(task, title):
    return Subtask.objects.create(task=task, title=title.strip())


def toggle_subtask(task, subtask_id, actor, audit=None):
    try:
        subtask = task.subtasks.get(pk=subtask_id)
    except Subtask.DoesNotExist:
        raise SubtaskNotFound()

    subtask.completed = not subtask.completed
    subtask.save(update_fields=["completed"])

    if subtask.completed:
        _audit(audit).emit(ActivityEntry(
            actor_id=getattr(actor, "pk", None),
            action=ActivityAction.SUBTASK_COMPLETED,
            target_type=TargetType.TASK,
            target_id=task.pk,
            details=f'Completed subtask "{subtask.title}" in "{task.title}"',
        ))
    return subtask


def add_comment(task, actor, text, audit=None):
    comment = Comment.objects.create(task=task, user=actor, text=text)
    _audit(audit).emit(ActivityEntry(
        actor_id=getattr(actor, "pk", None),
        action=ActivityAction.COMMENT_ADDED,
        target_type=TargetType.COMMENT,
        target_id=comment.pk,
        details=f'Commented on "{task.title}"',
        metadata={"task_id": task.pk},
    ))
    delivery.notify_comment(comment, getattr(actor, "pk", None))
    return comment


def delete_comment(comment, actor):
    comment_id, task_id = comment.pk, comment.task_id
    comment.delete()
    logger.info("Comment %s on task %s deleted by %s", comment_id, task_id, getattr(actor, "pk", None))
    return comment_id
