from django.conf import settings
from django.db import models
from django.db.models import Q


class TaskStatus(models.TextChoices):
    TODO = "todo", "To Do"
    IN_PROGRESS = "in_progress", "In Progress"
    REVIEW = "review", "Review"
    DONE = "done", "Done"


# Moving a task into this column is audited as a completion
TERMINAL_STATUS = TaskStatus.DONE

# Highest order a client may ask for. Keeps headroom under the 32-bit
# column limit for the +1 shifts of later inserts.
MAX_ORDER = 2_000_000_000


class TaskPriority(models.TextChoices):
    CRITICAL = "critical", "Critical"
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"


class TaskQuerySet(models.QuerySet):
    def visible_to(self, user):
        if user.is_staff:
            return self
        return self.filter(
            Q(project__members=user) | Q(project__created_by=user)
        ).distinct()

    def in_column(self, project_id, status):
        return self.filter(project_id=project_id, status=status)


class Task(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000, blank=True, default="")

    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="tasks"
    )
    status = models.CharField(
        max_length=32,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO
    )
    # Position inside the (project, status) column. Only written through
    # apps.tasks.store so every writer shares the same shift primitive.
    order = models.PositiveIntegerField(default=0)
    priority = models.CharField(
        max_length=16,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM
    )

    assignees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="assigned_tasks",
        blank=True
    )
    labels = models.JSONField(default=list, blank=True)
    deadline = models.DateTimeField(null=True, blank=True)
    attachments = models.JSONField(default=list, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="tasks_created"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TaskQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["project", "status", "order"], name="task_column_idx"),
            models.Index(fields=["deadline"], name="task_deadline_idx"),
        ]
        ordering = ["status", "order", "-created_at"]

    def __str__(self) -> str:
        return self.title


class Subtask(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="subtasks")
    title = models.CharField(max_length=200)
    completed = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.title


class Comment(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="task_comments"
    )
    text = models.TextField(max_length=1000)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["task", "created_at"], name="comment_task_created_idx")]

    def __str__(self) -> str:
        return f"Comment #{self.pk} on {self.task_id}"
