import random

from django.contrib.auth.models import AbstractUser
from django.db import models

AVATAR_COLORS = [
    "#6366f1", "#8b5cf6", "#ec4899", "#ef4444", "#f97316",
    "#eab308", "#22c55e", "#14b8a6", "#06b6d4", "#3b82f6",
]


def random_avatar_color():
    return random.choice(AVATAR_COLORS)


class User(AbstractUser):
    display_name = models.CharField(max_length=150, blank=True, default="")
    role = models.CharField(max_length=100, blank=True, default="")
    avatar_color = models.CharField(max_length=7, default=random_avatar_color)

    def __str__(self):
        return self.username

    @property
    def name(self):
        return self.display_name or self.get_full_name() or self.username
