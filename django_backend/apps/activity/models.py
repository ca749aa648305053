from django.conf import settings
from django.db import models


class ActivityAction(models.TextChoices):
    TASK_CREATED = "task_created", "Task Created"
    TASK_UPDATED = "task_updated", "Task Updated"
    TASK_DELETED = "task_deleted", "Task Deleted"
    TASK_MOVED = "task_moved", "Task Moved"
    TASK_ASSIGNED = "task_assigned", "Task Assigned"
    TASK_COMPLETED = "task_completed", "Task Completed"
    PROJECT_CREATED = "project_created", "Project Created"
    PROJECT_UPDATED = "project_updated", "Project Updated"
    PROJECT_ARCHIVED = "project_archived", "Project Archived"
    COMMENT_ADDED = "comment_added", "Comment Added"
    USER_ADDED = "user_added", "User Added"
    USER_UPDATED = "user_updated", "User Updated"
    SUBTASK_COMPLETED = "subtask_completed", "Subtask Completed"


class TargetType(models.TextChoices):
    TASK = "task", "Task"
    PROJECT = "project", "Project"
    USER = "user", "User"
    COMMENT = "comment", "Comment"


class Activity(models.Model):
    """
    Append-only audit record.

    ``target_id`` is not a foreign key: records outlive the task, project or
    comment they describe.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="activities",
    )
    action = models.CharField(max_length=32, choices=ActivityAction.choices)
    target_type = models.CharField(max_length=16, choices=TargetType.choices)
    target_id = models.PositiveBigIntegerField()
    details = models.CharField(max_length=500, blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["created_at"], name="activity_created_idx"),
            models.Index(fields=["target_type", "target_id"], name="activity_target_idx"),
        ]
        verbose_name_plural = "activities"

    def __str__(self) -> str:
        return f"{self.action} on {self.target_type} {self.target_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Activity records are append-only and cannot be modified")
        super().save(*args, **kwargs)
