"""
DRF exception handler.

Business-rule errors raised by the services layer carry their own status
code and message. Datastore failures are logged with full detail here and
answered with a generic message so driver internals never reach clients.
"""

import logging

from django.db import DatabaseError, IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from services.ride_management.exceptions import RideManagementError

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "A record with these details already exists."
SERVER_ERROR_MESSAGE = "A server error occurred. Please try again later."


def api_exception_handler(exc, context):
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, RideManagementError):
        set_rollback()
        return Response({"error": exc.message}, status=exc.status_code)

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error in %s: %s", view_name, exc)
        set_rollback()
        return Response({"error": DUPLICATE_MESSAGE}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, DatabaseError):
        logger.exception("Database error in %s", view_name)
        set_rollback()
        return Response(
            {"error": SERVER_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return exception_handler(exc, context)
