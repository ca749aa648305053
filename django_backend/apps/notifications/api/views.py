from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.notifications.models import Notification
from .serializers import NotificationSerializer

# The inbox shows only the most recent entries
INBOX_SIZE = 50


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """The signed-in user's own notifications, newest first."""

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Notification.objects.for_user(self.request.user).order_by("-created_at", "-id")

    def list(self, request, *args, **kwargs):
        notifications = self.get_queryset()[:INBOX_SIZE]
        return Response(self.get_serializer(notifications, many=True).data)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"count": self.get_queryset().unread().count()})

    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        notification = self.get_object()
        if not notification.read:
            notification.read = True
            notification.save(update_fields=["read"])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["put"], url_path="read-all")
    def read_all(self, request):
        updated = self.get_queryset().unread().update(read=True)
        return Response({"updated": updated})
