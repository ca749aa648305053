from rest_framework import serializers

from apps.activity.models import Activity
from apps.users.api.serializers import UserSummarySerializer


class ActivitySerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Activity
        fields = ["id", "user", "action", "target_type", "target_id", "details", "metadata", "created_at"]
        read_only_fields = fields
