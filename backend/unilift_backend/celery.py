"""Celery application for UniLift background tasks."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "unilift_backend.settings.settings")

app = Celery("unilift_backend")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
