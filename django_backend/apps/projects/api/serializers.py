from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.projects.models import Project
from apps.users.api.serializers import UserSummarySerializer

User = get_user_model()


class ProjectSerializer(serializers.ModelSerializer):
    members = serializers.PrimaryKeyRelatedField(
        many=True, queryset=User.objects.filter(is_active=True), required=False
    )
    member_details = UserSummarySerializer(source="members", many=True, read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    task_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Project
        fields = [
            "id",
            "name",
            "description",
            "status",
            "color",
            "members",
            "member_details",
            "created_by",
            "task_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Project name is required.")
        return value

    def validate_color(self, value):
        if len(value) != 7 or not value.startswith("#"):
            raise serializers.ValidationError("Use a hex color such as #6366f1.")
        return value
