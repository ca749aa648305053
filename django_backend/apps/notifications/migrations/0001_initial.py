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
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("task_assigned", "Task Assigned"), ("task_updated", "Task Updated"), ("comment_added", "Comment Added"), ("project_update", "Project Update")], max_length=32)),
                ("message", models.CharField(max_length=500)),
                ("read", models.BooleanField(default=False)),
                ("related_type", models.CharField(blank=True, choices=[("task", "Task"), ("project", "Project"), ("comment", "Comment")], default="", max_length=16)),
                ("related_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["user", "read"], name="notification_user_read_idx")],
            },
        ),
    ]
