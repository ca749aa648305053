from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    TASK_ASSIGNED = "task_assigned", "Task Assigned"
    TASK_UPDATED = "task_updated", "Task Updated"
    COMMENT_ADDED = "comment_added", "Comment Added"
    PROJECT_UPDATE = "project_update", "Project Update"


class RelatedType(models.TextChoices):
    TASK = "task", "Task"
    PROJECT = "project", "Project"
    COMMENT = "comment", "Comment"


class NotificationQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)

    def unread(self):
        return self.filter(read=False)


class Notification(models.Model):
    """An entry in one user's in-app inbox"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications"
    )
    type = models.CharField(max_length=32, choices=NotificationType.choices)
    message = models.CharField(max_length=500)
    read = models.BooleanField(default=False)
    # Like activity targets, not a foreign key: the task may be gone by the
    # time the notification is read.
    related_type = models.CharField(max_length=16, choices=RelatedType.choices, blank=True, default="")
    related_id = models.PositiveBigIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "read"], name="notification_user_read_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} for {self.user_id}"
