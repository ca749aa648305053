import logging

from django.contrib.auth import get_user_model
from rest_framework import viewsets, permissions
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.response import Response

from apps.activity.models import ActivityAction, TargetType
from apps.activity.sinks import ActivityEntry
from apps.tasks.audit import TransitionAudit
from .serializers import UserAdminSerializer, UserSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


def log_user_activity(actor, user, action, details):
    return TransitionAudit().emit(ActivityEntry(
        actor_id=actor.pk,
        action=action,
        target_type=TargetType.USER,
        target_id=user.pk,
        details=details,
    ))


class UserViewSet(viewsets.ModelViewSet):
    """
    Users, listed so clients can pick task assignees and project members.

    Everyone signed in can read active accounts; staff manage the team and
    also see deactivated accounts. Deleting a user deactivates it, so the
    tasks, comments and activity it authored keep their author.
    """

    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [SearchFilter]
    search_fields = ["username", "display_name", "first_name", "last_name", "email"]

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update", "destroy"):
            return [permissions.IsAuthenticated(), permissions.IsAdminUser()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.request.user.is_staff:
            return UserAdminSerializer
        return UserSerializer

    def get_queryset(self):
        qs = User.objects.order_by("username")
        if not self.request.user.is_staff:
            return qs.filter(is_active=True)

        active = self.request.query_params.get("active")
        if active is not None:
            qs = qs.filter(is_active=active.lower() == "true")
        return qs

    def perform_create(self, serializer):
        user = serializer.save()
        label = f' as {user.role}' if user.role else ""
        log_user_activity(
            self.request.user, user, ActivityAction.USER_ADDED,
            f'Added team member "{user.name}"{label}',
        )

    def perform_update(self, serializer):
        user = serializer.save()
        log_user_activity(
            self.request.user, user, ActivityAction.USER_UPDATED,
            f'Updated team member "{user.name}"',
        )

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active"])
        logger.info("User %s deactivated by %s", instance.pk, self.request.user.pk)
        log_user_activity(
            self.request.user, instance, ActivityAction.USER_UPDATED,
            f'Deactivated team member "{instance.name}"',
        )

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(UserSerializer(request.user).data)
