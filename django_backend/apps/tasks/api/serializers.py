from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.projects.models import Project
from apps.tasks import services
from apps.tasks.models import MAX_ORDER, Comment, Subtask, Task, TaskStatus
from apps.users.api.serializers import UserSummarySerializer

User = get_user_model()


class SubtaskSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subtask
        fields = ["id", "title", "completed"]
        read_only_fields = ["id"]

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Subtask title cannot be blank.")
        return value


class TaskSerializer(serializers.ModelSerializer):
    project = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all())
    assignees = serializers.PrimaryKeyRelatedField(
        many=True, queryset=User.objects.filter(is_active=True), required=False
    )
    assignee_details = UserSummarySerializer(source="assignees", many=True, read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    subtasks = SubtaskSerializer(many=True, required=False)
    labels = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False
    )

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "project",
            "status",
            "order",
            "priority",
            "assignees",
            "assignee_details",
            "labels",
            "deadline",
            "attachments",
            "subtasks",
            "created_by",
            "created_at",
            "updated_at",
        ]
        # Position changes go through the reorder endpoint
        read_only_fields = ["id", "order", "attachments", "created_by", "created_at", "updated_at"]

    def validate_project(self, project):
        request = self.context.get("request")
        if self.instance is not None and project.pk != self.instance.project_id:
            raise serializers.ValidationError(
                "Use the reorder endpoint to move a task to another project."
            )
        if request and not Project.objects.visible_to(request.user).filter(pk=project.pk).exists():
            raise serializers.ValidationError("Project not found.")
        return project

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title cannot be blank.")
        return value

    def create(self, validated_data):
        request = self.context["request"]
        return services.create_task(actor=request.user, **validated_data)

    def update(self, instance, validated_data):
        request = self.context["request"]
        validated_data.pop("subtasks", None)
        validated_data.pop("project", None)
        return services.update_task(instance, validated_data, actor=request.user)


class CommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "task", "user", "text", "created_at"]
        read_only_fields = ["id", "task", "user", "created_at"]

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment cannot be blank.")
        return value


class ReorderRequestSerializer(serializers.Serializer):
    taskId = serializers.IntegerField(min_value=1)
    newStatus = serializers.ChoiceField(choices=TaskStatus.choices)
    newOrder = serializers.IntegerField(min_value=0, max_value=MAX_ORDER)
    projectId = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ColumnQuerySerializer(serializers.Serializer):
    project = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(choices=TaskStatus.choices)
