import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("taskboard")
app.config_from_object("django.conf:settings", namespace="CELERY")

# Task modules are named celery_tasks.py so they don't clash with the tasks app
app.autodiscover_tasks(related_name="celery_tasks")
