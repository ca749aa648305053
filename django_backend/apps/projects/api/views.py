import logging

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.activity.models import ActivityAction, TargetType
from apps.activity.sinks import ActivityEntry
from apps.notifications.delivery import notify_project_members
from apps.projects.models import Project, ProjectStatus
from apps.tasks.api.serializers import TaskSerializer
from apps.tasks import columns
from apps.tasks.audit import TransitionAudit
from apps.tasks.consistency import renumber_project
from .permissions import IsProjectOwnerOrAdmin
from .serializers import ProjectSerializer

logger = logging.getLogger(__name__)


def log_project_activity(user, project, action, details):
    return TransitionAudit().emit(ActivityEntry(
        actor_id=user.pk,
        action=action,
        target_type=TargetType.PROJECT,
        target_id=project.pk,
        details=details,
    ))


class ProjectViewSet(viewsets.ModelViewSet):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated, IsProjectOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["status"]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at", "updated_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return (
            Project.objects.visible_to(self.request.user)
            .select_related("created_by")
            .prefetch_related("members")
            .annotate(task_count=Count("tasks", distinct=True))
        )

    def perform_create(self, serializer):
        user = self.request.user
        project = serializer.save(created_by=user)
        project.members.add(user)
        log_project_activity(
            user, project, ActivityAction.PROJECT_CREATED, f'Created project "{project.name}"'
        )

    def perform_update(self, serializer):
        project = serializer.save()
        if project.status == ProjectStatus.ARCHIVED:
            action, verb = ActivityAction.PROJECT_ARCHIVED, "Archived"
        else:
            action, verb = ActivityAction.PROJECT_UPDATED, "Updated"
        log_project_activity(self.request.user, project, action, f'{verb} project "{project.name}"')
        notify_project_members(project, self.request.user.pk, f'{verb} project "{project.name}"')

    def perform_destroy(self, instance):
        # Tasks go with the project, and so do their columns
        logger.info("Deleting project %s with its tasks", instance.pk)
        instance.delete()

    @action(detail=True, methods=["get"])
    def board(self, request, pk=None):
        """All four columns of the board, each in display order."""
        project = self.get_object()
        board = columns.board(project.pk)
        return Response({
            "project": project.pk,
            "columns": {
                status: TaskSerializer(tasks, many=True, context={"request": request}).data
                for status, tasks in board.items()
            },
        })

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def renumber(self, request, pk=None):
        """Rewrite every column of the board to dense 0..N-1 orders."""
        project = self.get_object()
        return Response({"project": project.pk, "changed": renumber_project(project.pk)})
