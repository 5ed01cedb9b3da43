"""WSGI entry point for the UniLift backend."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "unilift_backend.settings.settings")

application = get_wsgi_application()
