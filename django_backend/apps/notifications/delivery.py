"""
Writes entries into users' in-app inboxes.

Notifications follow a committed change and are written by a Celery job, so
a slow or unavailable broker never holds up or fails the change itself.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.projects.models import Project
from .models import Notification, NotificationType, RelatedType

logger = logging.getLogger(__name__)
User = get_user_model()


def notify_users(user_ids, notification_type, message, related_type="", related_id=None):
    """Create one notification per active user in ``user_ids``. Returns the count."""
    recipients = User.objects.filter(pk__in=set(user_ids), is_active=True).values_list("pk", flat=True)
    created = Notification.objects.bulk_create([
        Notification(
            user_id=user_id,
            type=notification_type,
            message=message,
            related_type=related_type,
            related_id=related_id,
        )
        for user_id in recipients
    ])
    return len(created)


def project_member_ids(project_id):
    project = Project.objects.filter(pk=project_id).first()
    if project is None:
        return set()
    ids = set(project.members.values_list("pk", flat=True))
    if project.created_by_id is not None:
        ids.add(project.created_by_id)
    return ids


def queue_notification(user_ids, notification_type, message, related_type="", related_id=None,
                       exclude_user_id=None):
    """Deliver after commit to everyone in ``user_ids`` except ``exclude_user_id``."""
    recipients = sorted({uid for uid in user_ids if uid is not None} - {exclude_user_id})
    if not recipients:
        return
    transaction.on_commit(
        lambda: _dispatch(recipients, notification_type, message, related_type, related_id)
    )


def _dispatch(recipients, notification_type, message, related_type, related_id):
    from .celery_tasks import deliver_notifications

    try:
        deliver_notifications.delay(recipients, notification_type, message, related_type, related_id)
    except Exception:
        logger.warning(
            "Could not deliver %s notification to %s", notification_type, recipients, exc_info=True
        )


def notify_task_change(actor_id, before, after):
    """Tell newly added assignees, and the assignees of a task that changed column."""
    added = after.assignee_ids - before.assignee_ids
    if added:
        queue_notification(
            added, NotificationType.TASK_ASSIGNED, f'You were assigned to "{after.title}"',
            RelatedType.TASK, after.task_id, exclude_user_id=actor_id,
        )
    if before.status != after.status:
        queue_notification(
            after.assignee_ids, NotificationType.TASK_UPDATED,
            f'"{after.title}" moved from {before.status} to {after.status}',
            RelatedType.TASK, after.task_id, exclude_user_id=actor_id,
        )


def notify_comment(comment, actor_id):
    task = comment.task
    recipients = set(task.assignees.values_list("pk", flat=True))
    recipients.add(task.created_by_id)
    queue_notification(
        recipients, NotificationType.COMMENT_ADDED, f'New comment on "{task.title}"',
        RelatedType.COMMENT, comment.pk, exclude_user_id=actor_id,
    )


def notify_project_members(project, actor_id, message):
    queue_notification(
        project_member_ids(project.pk), NotificationType.PROJECT_UPDATE, message,
        RelatedType.PROJECT, project.pk, exclude_user_id=actor_id,
    )
