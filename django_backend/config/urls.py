from django.contrib import admin
from django.http import HttpResponse
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


def healthz(_): return HttpResponse("ok", content_type="text/plain")


urlpatterns = [
    path("admin/", admin.site.urls),
    path("healthz/", healthz),

    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path(
        "api/",
        include([
            path("", include("apps.users.api.urls")),
            path("", include("apps.projects.api.urls")),
            path("", include("apps.tasks.api.urls")),
            path("", include("apps.activity.api.urls")),
            path("", include("apps.notifications.api.urls")),
        ])
    ),
]
