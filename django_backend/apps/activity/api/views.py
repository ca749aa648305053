from rest_framework import viewsets, permissions
from rest_framework.pagination import PageNumberPagination

from apps.activity.models import Activity
from .serializers import ActivitySerializer


class ActivityPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "limit"
    max_page_size = 200


class ActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """Activity feed, newest first."""

    serializer_class = ActivitySerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = ActivityPagination
    filterset_fields = ["target_type", "target_id", "action", "user"]

    def get_queryset(self):
        return Activity.objects.select_related("user").order_by("-created_at", "-id")
