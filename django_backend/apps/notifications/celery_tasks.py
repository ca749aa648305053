import logging

from celery import shared_task

from apps.notifications.delivery import notify_users

logger = logging.getLogger(__name__)


@shared_task
def deliver_notifications(user_ids, notification_type, message, related_type="", related_id=None):
    """Write inbox entries for the given users. Returns how many were written."""
    created = notify_users(user_ids, notification_type, message, related_type, related_id)
    logger.debug("Delivered %d %s notification(s)", created, notification_type)
    return created
