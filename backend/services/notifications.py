"""
Notified-flag tracker.

Student edits, cancellations and the student dashboard produce one message
per request, then `notified` flips to True so the next call stays quiet.
The driver dashboard only reads the flag. The flag is only ever set, never
cleared. There is no queue: a missed poll just means the message shows up
on the next one.
"""

import logging
from typing import Iterable, List, Optional

from rides.models import RideRequest

logger = logging.getLogger(__name__)

NOTIFY_STATUSES = (RideRequest.PENDING, RideRequest.ASSIGNED, RideRequest.IN_PROGRESS)


def _flip(ride_id: int, status: str) -> bool:
    """Guarded update: only the first caller to see notified=False wins."""
    return bool(
        RideRequest.objects.filter(id=ride_id, status=status, notified=False)
        .update(notified=True)
    )


def emit_status_notification(ride: RideRequest) -> Optional[str]:
    """
    One-shot "status changed" message for a non-terminal, unflagged request.

    Returns the message, or None when nothing should be sent.
    """
    if ride.status not in NOTIFY_STATUSES or ride.notified:
        return None

    if not _flip(ride.id, ride.status):
        ride.notified = True
        return None

    ride.notified = True
    logger.info("Sending notification for request %s with status %s", ride.id, ride.status)
    return f"Notification: Request is {ride.status}"


def collect_status_notifications(rides: Iterable[RideRequest]) -> List[dict]:
    """
    Read-only view of the open, unflagged rides a dashboard observed.

    Does not set `notified`, which also gates the student's completion alert.
    """
    return [
        {
            "request_id": ride.id,
            "status": ride.status,
            "message": f"Notification: Request is {ride.status}",
        }
        for ride in rides
        if ride.status in NOTIFY_STATUSES and not ride.notified
    ]


def collect_completion_notifications(student) -> List[dict]:
    """
    "Ride completed, please rate" messages for a student's completed,
    unflagged requests. Each request produces its message once.
    """
    completed = RideRequest.objects.filter(
        student=student,
        status=RideRequest.COMPLETED,
        notified=False,
    ).order_by("-created_at")

    notifications = []
    for ride in completed:
        if not _flip(ride.id, RideRequest.COMPLETED):
            continue
        ride.notified = True
        notifications.append({
            "request_id": ride.id,
            "status": ride.status,
            "message": "Your ride has been completed. Please rate your driver.",
            "can_rate": not ride.is_rated,
        })

    if notifications:
        logger.info(
            "Sent %d completion notification(s) to student %s",
            len(notifications), getattr(student, "id", student)
        )
    return notifications


def mark_notified(ride_id: int) -> bool:
    """
    Explicitly mark a completed request as notified (client dismissed the alert).
    Idempotent; returns True only when the flag actually changed.
    """
    return _flip(ride_id, RideRequest.COMPLETED)
