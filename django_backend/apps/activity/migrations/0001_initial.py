import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[("task_created", "Task Created"), ("task_updated", "Task Updated"), ("task_deleted", "Task Deleted"), ("task_moved", "Task Moved"), ("task_assigned", "Task Assigned"), ("task_completed", "Task Completed"), ("project_created", "Project Created"), ("project_updated", "Project Updated"), ("project_archived", "Project Archived"), ("comment_added", "Comment Added"), ("user_added", "User Added"), ("user_updated", "User Updated"), ("subtask_completed", "Subtask Completed")], max_length=32)),
                ("target_type", models.CharField(choices=[("task", "Task"), ("project", "Project"), ("user", "User"), ("comment", "Comment")], max_length=16)),
                ("target_id", models.PositiveBigIntegerField()),
                ("details", models.CharField(blank=True, default="", max_length=500)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="activities", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "activities",
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["created_at"], name="activity_created_idx"), models.Index(fields=["target_type", "target_id"], name="activity_target_idx")],
            },
        ),
    ]
