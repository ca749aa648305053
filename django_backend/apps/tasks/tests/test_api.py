from unittest import mock

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase, APITransactionTestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.activity.models import Activity, ActivityAction
from apps.tasks.celery_tasks import renumber_column_task
from apps.tasks.models import MAX_ORDER, Comment, Task, TaskPriority, TaskStatus
from .factories import column_state, make_column, make_project, make_user


class TaskAPITestCase(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.outsider = make_user("mallory")
        self.project = make_project(self.user)
        self.authenticate()

    def authenticate(self, user=None):
        """Helper method to authenticate a user"""
        refresh = RefreshToken.for_user(user or self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def reorder(self, task, new_status, new_order, **extra):
        data = {"taskId": task.pk, "newStatus": new_status, "newOrder": new_order, **extra}
        return self.client.put(reverse("tasks-reorder"), data, format="json")


class TaskCrudAPITest(TaskAPITestCase):
    def test_task_list_requires_authentication(self):
        self.client.credentials()
        response = self.client.get(reverse("tasks-list"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_only_shows_member_projects(self):
        make_column(self.project, TaskStatus.TODO, ["Mine"])
        hidden = make_project(self.outsider, name="Hidden")
        make_column(hidden, TaskStatus.TODO, ["Theirs"])

        response = self.client.get(reverse("tasks-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t["title"] for t in response.data], ["Mine"])

    def test_list_filters_by_status(self):
        make_column(self.project, TaskStatus.TODO, ["T"])
        make_column(self.project, TaskStatus.DONE, ["D"])

        response = self.client.get(reverse("tasks-list"), {"status": TaskStatus.DONE})

        self.assertEqual([t["title"] for t in response.data], ["D"])

    def test_create_task(self):
        make_column(self.project, TaskStatus.TODO, ["A"])
        data = {
            "title": "New API Task",
            "description": "Created via API",
            "project": self.project.pk,
            "priority": TaskPriority.HIGH,
            "assignees": [self.user.pk],
            "labels": ["backend"],
            "subtasks": [{"title": "first step"}],
        }

        response = self.client.post(reverse("tasks-list"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], TaskStatus.TODO)
        self.assertEqual(response.data["order"], 1)
        self.assertEqual(response.data["created_by"]["id"], self.user.pk)
        self.assertEqual(response.data["assignee_details"][0]["id"], self.user.pk)
        self.assertEqual(response.data["subtasks"][0]["title"], "first step")
        self.assertEqual(
            list(Activity.objects.order_by("id").values_list("action", flat=True)),
            [ActivityAction.TASK_CREATED, ActivityAction.TASK_ASSIGNED],
        )

    def test_create_ignores_client_order(self):
        make_column(self.project, TaskStatus.TODO, ["A", "B"])

        response = self.client.post(
            reverse("tasks-list"),
            {"title": "C", "project": self.project.pk, "order": 0},
            format="json",
        )

        self.assertEqual(response.data["order"], 2)

    def test_create_in_foreign_project_rejected(self):
        hidden = make_project(self.outsider, name="Hidden")

        response = self.client.post(
            reverse("tasks-list"), {"title": "X", "project": hidden.pk}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("project", response.data)

    def test_blank_title_rejected(self):
        response = self.client.post(
            reverse("tasks-list"), {"title": "   ", "project": self.project.pk}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], 400)

    def test_patch_status_appends_to_new_column(self):
        a, b = make_column(self.project, TaskStatus.TODO, ["A", "B"])
        make_column(self.project, TaskStatus.REVIEW, ["R"])

        response = self.client.patch(
            reverse("tasks-detail", args=[a.pk]), {"status": TaskStatus.REVIEW}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["order"], 1)
        self.assertEqual(column_state(self.project), [("B", 0)])
        self.assertEqual(Activity.objects.get().action, ActivityAction.TASK_MOVED)

    def test_patch_cannot_move_project(self):
        (a,) = make_column(self.project, TaskStatus.TODO, ["A"])
        other = make_project(self.user, name="Other")

        response = self.client.patch(
            reverse("tasks-detail", args=[a.pk]), {"project": other.pk}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_closes_gap(self):
        a, b, c = make_column(self.project, TaskStatus.TODO, ["A", "B", "C"])

        response = self.client.delete(reverse("tasks-detail", args=[a.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(column_state(self.project), [("B", 0), ("C", 1)])
        self.assertEqual(Activity.objects.get().action, ActivityAction.TASK_DELETED)

    def test_outsider_cannot_see_task(self):
        (a,) = make_column(self.project, TaskStatus.TODO, ["A"])
        self.authenticate(self.outsider)

        response = self.client.get(reverse("tasks-detail", args=[a.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ReorderAPITest(TaskAPITestCase):
    def setUp(self):
        super().setUp()
        self.a, self.b, self.c = make_column(self.project, TaskStatus.TODO, ["A", "B", "C"])

    def test_reorder_within_column(self):
        response = self.reorder(self.a, TaskStatus.TODO, 2)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["order"], 2)
        self.assertEqual(column_state(self.project), [("B", 0), ("C", 1), ("A", 2)])
        self.assertFalse(Activity.objects.exists())

    def test_reorder_across_columns(self):
        response = self.reorder(self.b, TaskStatus.DONE, 0)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], TaskStatus.DONE)
        activity = Activity.objects.get()
        self.assertEqual(activity.action, ActivityAction.TASK_COMPLETED)
        self.assertEqual(activity.metadata, {"from": "todo", "to": "done"})
        self.assertEqual(activity.user, self.user)

    def test_reorder_validation(self):
        for new_status, new_order in [("blocked", 0), (TaskStatus.DONE, -1), (TaskStatus.DONE, "x")]:
            response = self.reorder(self.a, new_status, new_order)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertEqual(column_state(self.project), [("A", 0), ("B", 1), ("C", 2)])

    def test_reorder_rejects_order_above_limit(self):
        for huge in (MAX_ORDER + 1, 2**63):
            response = self.reorder(self.a, TaskStatus.DONE, huge)

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("newOrder", response.data)

        self.assertEqual(column_state(self.project), [("A", 0), ("B", 1), ("C", 2)])
        self.assertEqual(column_state(self.project, TaskStatus.DONE), [])

    def test_reorder_unknown_task(self):
        response = self.client.put(
            reverse("tasks-reorder"),
            {"taskId": 999999, "newStatus": TaskStatus.TODO, "newOrder": 0},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "task_not_found")

    def test_reorder_foreign_task_is_not_found(self):
        self.authenticate(self.outsider)

        response = self.reorder(self.a, TaskStatus.DONE, 0)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_reorder_into_foreign_project_is_not_found(self):
        hidden = make_project(self.outsider, name="Hidden")

        response = self.reorder(self.a, TaskStatus.TODO, 0, projectId=hidden.pk)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "project_not_found")
        self.assertEqual(Task.objects.get(pk=self.a.pk).project_id, self.project.pk)

    def test_reorder_broadcasts_after_commit(self):
        with mock.patch("apps.tasks.api.views.broadcast_board_change") as broadcast:
            with self.captureOnCommitCallbacks(execute=True):
                self.reorder(self.a, TaskStatus.REVIEW, 0)

        broadcast.assert_called_once()
        args, kwargs = broadcast.call_args
        self.assertEqual(args, (self.project.pk, "moved"))
        self.assertEqual(kwargs["task_id"], self.a.pk)
        self.assertCountEqual(kwargs["columns"], [TaskStatus.TODO, TaskStatus.REVIEW])

    def test_conflict_maps_to_409(self):
        from apps.tasks.exceptions import ConflictError

        with mock.patch("apps.tasks.api.views.move_task", side_effect=ConflictError()):
            response = self.reorder(self.a, TaskStatus.DONE, 0)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "order_conflict")


class ColumnAPITest(TaskAPITestCase):
    def test_column_in_display_order(self):
        Task.objects.create(project=self.project, title="late", status=TaskStatus.TODO, order=4)
        make_column(self.project, TaskStatus.TODO, ["A", "B"])

        response = self.client.get(
            reverse("tasks-column"), {"project": self.project.pk, "status": TaskStatus.TODO}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t["title"] for t in response.data], ["A", "B", "late"])

    def test_column_requires_valid_query(self):
        response = self.client.get(reverse("tasks-column"), {"project": self.project.pk})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_column_of_foreign_project(self):
        hidden = make_project(self.outsider, name="Hidden")

        response = self.client.get(
            reverse("tasks-column"), {"project": hidden.pk, "status": TaskStatus.TODO}
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(BOARD_REPAIR_DRIFT_ON_READ=True)
class DriftRepairOnReadAPITest(APITransactionTestCase):
    """Reads run in autocommit here, so the repair is queued immediately."""

    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.project = make_project(self.user)
        refresh = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        Task.objects.create(project=self.project, title="A", status=TaskStatus.TODO, order=0)
        Task.objects.create(project=self.project, title="B", status=TaskStatus.TODO, order=0)

    def test_unreachable_broker_does_not_fail_the_read(self):
        with mock.patch.object(
            renumber_column_task, "delay", side_effect=ConnectionError("broker down")
        ) as delay:
            with self.assertLogs("apps.tasks.consistency", level="WARNING") as logs:
                response = self.client.get(
                    reverse("tasks-column"), {"project": self.project.pk, "status": TaskStatus.TODO}
                )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        delay.assert_called_once_with(self.project.pk, TaskStatus.TODO)
        self.assertTrue(any("Could not queue renumber" in line for line in logs.output))

    def test_unreachable_broker_does_not_fail_the_board(self):
        with mock.patch.object(
            renumber_column_task, "delay", side_effect=ConnectionError("broker down")
        ):
            with self.assertLogs("apps.tasks.consistency", level="WARNING"):
                response = self.client.get(reverse("projects-board", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["columns"][TaskStatus.TODO]), 2)


class SubtaskCommentAPITest(TaskAPITestCase):
    def setUp(self):
        super().setUp()
        (self.task,) = make_column(self.project, TaskStatus.TODO, ["A"])

    def test_add_and_toggle_subtask(self):
        response = self.client.post(
            reverse("tasks-subtasks", args=[self.task.pk]), {"title": "step"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        subtask_id = response.data["id"]

        response = self.client.put(
            reverse("tasks-toggle-subtask", kwargs={"pk": self.task.pk, "subtask_id": subtask_id})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["completed"])
        self.assertEqual(Activity.objects.get().action, ActivityAction.SUBTASK_COMPLETED)

    def test_toggle_missing_subtask(self):
        response = self.client.put(reverse("tasks-toggle-subtask", kwargs={"pk": self.task.pk, "subtask_id": 999999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_comments(self):
        response = self.client.post(
            reverse("tasks-comments", args=[self.task.pk]), {"text": "Nice"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["user"]["id"], self.user.pk)

        response = self.client.get(reverse("tasks-comments", args=[self.task.pk]))

        self.assertEqual([c["text"] for c in response.data], ["Nice"])
        self.assertEqual(Comment.objects.count(), 1)
        self.assertEqual(Activity.objects.get().action, ActivityAction.COMMENT_ADDED)

    def test_author_deletes_comment(self):
        comment = Comment.objects.create(task=self.task, user=self.user, text="typo")

        response = self.client.delete(reverse("comments-detail", args=[comment.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Comment.objects.exists())

    def test_other_member_cannot_delete_comment(self):
        teammate = make_user("bob")
        self.project.members.add(teammate)
        comment = Comment.objects.create(task=self.task, user=self.user, text="mine")
        self.authenticate(teammate)

        response = self.client.delete(reverse("comments-detail", args=[comment.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Comment.objects.filter(pk=comment.pk).exists())

    def test_staff_deletes_any_comment(self):
        admin = make_user("root", is_staff=True)
        comment = Comment.objects.create(task=self.task, user=self.user, text="spam")
        self.authenticate(admin)

        response = self.client.delete(reverse("comments-detail", args=[comment.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_comment_on_hidden_task_is_not_found(self):
        comment = Comment.objects.create(task=self.task, user=self.user, text="private")
        self.authenticate(self.outsider)

        response = self.client.delete(reverse("comments-detail", args=[comment.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Comment.objects.filter(pk=comment.pk).exists())
