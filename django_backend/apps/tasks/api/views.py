from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.projects.models import Project
from apps.tasks import services
from apps.tasks.columns import list_column
from apps.tasks.exceptions import ProjectNotFound, TaskNotFound
from apps.tasks.models import Comment, Task
from apps.tasks.reorder import move_task
from apps.tasks.websockets.broadcast import broadcast_board_change
from .permissions import IsCommentAuthorOrAdmin, IsProjectMemberOrAdmin
from .serializers import (
    ColumnQuerySerializer,
    CommentSerializer,
    ReorderRequestSerializer,
    SubtaskSerializer,
    TaskSerializer,
)


def scoped_tasks(request):
    qs = Task.objects.select_related("created_by", "project") \
                     .prefetch_related("assignees", "subtasks")
    return qs.visible_to(request.user)


def notify_board(project_ids, reason, task_id, columns=()):
    """Broadcast to each affected board once the transaction has committed."""
    for project_id in {pid for pid in project_ids if pid is not None}:
        transaction.on_commit(
            lambda pid=project_id: broadcast_board_change(
                pid, reason, task_id=task_id, columns=list(columns)
            )
        )


class TaskViewSet(viewsets.ModelViewSet):
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated, IsProjectMemberOrAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["project", "status", "priority", "assignees"]
    search_fields = ["title", "description"]
    ordering_fields = ["deadline", "priority", "created_at", "updated_at", "order"]
    ordering = ["status", "order", "-created_at"]

    def get_queryset(self):
        return scoped_tasks(self.request)

    def perform_create(self, serializer):
        task = serializer.save()
        notify_board([task.project_id], "created", task.pk, [task.status])

    def perform_update(self, serializer):
        old_status = serializer.instance.status
        task = serializer.save()
        notify_board([task.project_id], "updated", task.pk, {old_status, task.status})

    def perform_destroy(self, instance):
        project_id, column = instance.project_id, instance.status
        task_id = services.delete_task(instance, actor=self.request.user)
        notify_board([project_id], "deleted", task_id, [column])

    @action(detail=False, methods=["put"])
    def reorder(self, request):
        """Drag-and-drop: move a task to a position in a column."""
        ser = ReorderRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        task_id, project_id = data["taskId"], data.get("projectId")

        # Tasks and projects the user cannot see are reported as missing
        task = scoped_tasks(request).filter(pk=task_id).first()
        if task is None:
            raise TaskNotFound()
        self.check_object_permissions(request, task)
        if project_id is not None and not Project.objects.visible_to(request.user).filter(pk=project_id).exists():
            raise ProjectNotFound()

        old_project_id, old_status = task.project_id, task.status
        task = move_task(
            task_id,
            data["newStatus"],
            data["newOrder"],
            project_id=project_id,
            actor=request.user,
        )
        notify_board(
            [old_project_id, task.project_id], "moved", task.pk, {old_status, task.status}
        )
        return Response(TaskSerializer(task, context={"request": request}).data)

    @action(detail=False, methods=["get"])
    def column(self, request):
        """One column of a board in display order."""
        ser = ColumnQuerySerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        project_id = ser.validated_data["project"]

        if not Project.objects.visible_to(request.user).filter(pk=project_id).exists():
            raise ProjectNotFound()
        tasks = list_column(project_id, ser.validated_data["status"])
        return Response(TaskSerializer(tasks, many=True, context={"request": request}).data)

    @action(detail=True, methods=["post"])
    def subtasks(self, request, pk=None):
        task = self.get_object()
        ser = SubtaskSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        subtask = services.add_subtask(task, ser.validated_data["title"])
        return Response(SubtaskSerializer(subtask).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put"], url_path=r"subtasks/(?P<subtask_id>\d+)")
    def toggle_subtask(self, request, pk=None, subtask_id=None):
        task = self.get_object()
        subtask = services.toggle_subtask(task, int(subtask_id), actor=request.user)
        return Response(SubtaskSerializer(subtask).data)

    @action(detail=True, methods=["post"])
    def comments(self, request, pk=None):
        task = self.get_object()
        ser = CommentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        comment = services.add_comment(task, request.user, ser.validated_data["text"])
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    @comments.mapping.get
    def list_comments(self, request, pk=None):
        task = self.get_object()
        qs = task.comments.select_related("user").order_by("-created_at")
        return Response(CommentSerializer(qs, many=True).data)


class CommentViewSet(mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Comments are created and listed under their task; deleted here by id."""

    serializer_class = CommentSerializer
    permission_classes = [permissions.IsAuthenticated, IsCommentAuthorOrAdmin]

    def get_queryset(self):
        return Comment.objects.filter(task__in=Task.objects.visible_to(self.request.user))

    def perform_destroy(self, instance):
        services.delete_comment(instance, actor=self.request.user)
