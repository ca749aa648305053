from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.activity.models import Activity, ActivityAction, TargetType
from apps.notifications.models import Notification, NotificationType
from apps.projects.models import Project, ProjectStatus
from apps.tasks.models import Task, TaskStatus

User = get_user_model()


class ProjectAPITest(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.owner = User.objects.create_user(username="owner", password="testpass123")
        self.member = User.objects.create_user(username="member", password="testpass123")
        self.outsider = User.objects.create_user(username="outsider", password="testpass123")
        self.admin = User.objects.create_user(username="admin", password="testpass123", is_staff=True)

        self.project = Project.objects.create(name="Website", created_by=self.owner)
        self.project.members.add(self.owner, self.member)
        self.authenticate(self.owner)

    def authenticate(self, user):
        refresh = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def add_task(self, title, status_, order, project=None):
        return Task.objects.create(
            project=project or self.project, title=title, status=status_, order=order
        )

    def test_create_project(self):
        response = self.client.post(
            reverse("projects-list"),
            {"name": "Mobile", "color": "#ec4899", "members": [self.member.pk]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        project = Project.objects.get(pk=response.data["id"])
        self.assertEqual(project.created_by, self.owner)
        self.assertCountEqual(project.members.all(), [self.owner, self.member])
        activity = Activity.objects.get()
        self.assertEqual(activity.action, ActivityAction.PROJECT_CREATED)
        self.assertEqual(activity.target_type, TargetType.PROJECT)

    def test_activity_failure_does_not_fail_create(self):
        with mock.patch(
            "apps.activity.sinks.DatabaseAuditSink.write", side_effect=RuntimeError("sink down")
        ):
            with self.assertLogs("apps.tasks.audit", level="ERROR"):
                response = self.client.post(
                    reverse("projects-list"), {"name": "Mobile"}, format="json"
                )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Project.objects.filter(name="Mobile").exists())
        self.assertFalse(Activity.objects.exists())

    def test_invalid_color(self):
        response = self.client.post(
            reverse("projects-list"), {"name": "Mobile", "color": "pink"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("color", response.data)

    def test_list_is_scoped_to_members(self):
        Project.objects.create(name="Secret", created_by=self.outsider)
        self.authenticate(self.member)

        response = self.client.get(reverse("projects-list"))

        self.assertEqual([p["name"] for p in response.data], ["Website"])

    def test_task_count(self):
        self.add_task("A", TaskStatus.TODO, 0)
        self.add_task("B", TaskStatus.DONE, 0)

        response = self.client.get(reverse("projects-detail", args=[self.project.pk]))

        self.assertEqual(response.data["task_count"], 2)

    def test_archive_is_logged(self):
        response = self.client.patch(
            reverse("projects-detail", args=[self.project.pk]),
            {"status": ProjectStatus.ARCHIVED},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Activity.objects.get().action, ActivityAction.PROJECT_ARCHIVED)

    def test_archive_notifies_other_members(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.client.patch(
                reverse("projects-detail", args=[self.project.pk]),
                {"status": ProjectStatus.ARCHIVED},
                format="json",
            )

        notification = Notification.objects.get()
        self.assertEqual(notification.user, self.member)
        self.assertEqual(notification.type, NotificationType.PROJECT_UPDATE)
        self.assertEqual(notification.message, 'Archived project "Website"')
        self.assertEqual(notification.related_id, self.project.pk)

    def test_update_is_logged(self):
        self.client.patch(
            reverse("projects-detail", args=[self.project.pk]), {"name": "Site"}, format="json"
        )

        self.assertEqual(Activity.objects.get().action, ActivityAction.PROJECT_UPDATED)

    def test_member_cannot_edit(self):
        self.authenticate(self.member)

        response = self.client.patch(
            reverse("projects-detail", args=[self.project.pk]), {"name": "Mine"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_cascades_to_tasks(self):
        self.add_task("A", TaskStatus.TODO, 0)

        response = self.client.delete(reverse("projects-detail", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Task.objects.exists())

    def test_board(self):
        self.add_task("B", TaskStatus.TODO, 1)
        self.add_task("A", TaskStatus.TODO, 0)
        self.add_task("R", TaskStatus.REVIEW, 0)
        self.authenticate(self.member)

        response = self.client.get(reverse("projects-board", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        columns = response.data["columns"]
        self.assertEqual(list(columns), ["todo", "in_progress", "review", "done"])
        self.assertEqual([t["title"] for t in columns["todo"]], ["A", "B"])
        self.assertEqual([t["title"] for t in columns["review"]], ["R"])

    def test_board_of_foreign_project(self):
        self.authenticate(self.outsider)

        response = self.client.get(reverse("projects-board", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_renumber_requires_staff(self):
        response = self.client.post(reverse("projects-renumber", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_renumber(self):
        self.add_task("A", TaskStatus.TODO, 3)
        self.add_task("B", TaskStatus.TODO, 7)
        self.authenticate(self.admin)

        response = self.client.post(reverse("projects-renumber", args=[self.project.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["changed"]["todo"], 2)
        self.assertEqual(
            list(Task.objects.order_by("order").values_list("title", "order")),
            [("A", 0), ("B", 1)],
        )
