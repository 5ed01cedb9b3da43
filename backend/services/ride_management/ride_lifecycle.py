"""
Core ride request lifecycle operations.

This module contains all the business logic for managing ride requests,
extracted from the views layer for better testability and reuse. Every
operation that writes runs in one transaction and locks the request row
before reading its status.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from rides.models import RideRequest
from students.models import Student
from services.assignment import claim_available_driver, release_driver
from services.notifications import emit_status_notification
from .exceptions import (
    RequestNotEditableError,
    RequestNotFoundError,
    RequestTerminalError,
    StudentNotFoundError,
)
from .transitions import (
    ACTIVE_STATUSES,
    EDITABLE_STATUSES,
    ensure_transition,
    is_terminal,
)

logger = logging.getLogger(__name__)


@dataclass
class RideResult:
    """Result object for ride operations."""
    success: bool
    ride: Optional[RideRequest] = None
    message: str = ""
    notification: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


def _lock_request(request_id) -> RideRequest:
    try:
        return RideRequest.objects.select_for_update().get(id=request_id)
    except RideRequest.DoesNotExist:
        raise RequestNotFoundError()


# ===================== Student Operations =====================

@transaction.atomic
def create_ride_request(
    student_id,
    pickup_location: str,
    pickup_time,
    destination: str,
    notes: Optional[str] = None,
) -> RideResult:
    """
    Create a ride request and assign an available driver to it.

    All or nothing: the driver claim and the insert share one transaction.

    Args:
        student_id: Student.id of the requester
        pickup_location: Where the student is collected
        pickup_time: Requested pickup datetime
        destination: Where the student is going
        notes: Optional free-text notes for the driver

    Returns:
        RideResult with the created ride (status Pending)

    Raises:
        StudentNotFoundError: If the student does not exist
        NoDriversAvailableError: If no driver could be assigned
    """
    try:
        student = Student.objects.get(id=student_id)
    except Student.DoesNotExist:
        raise StudentNotFoundError()

    driver = claim_available_driver()

    ride = RideRequest.objects.create(
        student=student,
        driver=driver,
        pickup_location=pickup_location,
        pickup_time=pickup_time,
        destination=destination,
        notes=notes or None,
        status=RideRequest.PENDING,
        notified=False,
    )

    logger.info(
        "Ride request %s created for student %s, driver %s assigned",
        ride.id, student.id, driver.id
    )

    return RideResult(
        success=True,
        ride=ride,
        message="Ride request submitted and driver assigned successfully!",
        extra={"driver_id": driver.id},
    )


@transaction.atomic
def update_request_fields(
    request_id,
    pickup_time,
    pickup_location: str,
    destination: str,
    notes: Optional[str] = None,
) -> RideResult:
    """
    Edit trip details while the ride has not started. Never changes status.

    Raises:
        RequestNotFoundError: If the request does not exist
        RequestNotEditableError: If the request is past Assigned
    """
    ride = _lock_request(request_id)

    notification = emit_status_notification(ride)

    if ride.status not in EDITABLE_STATUSES:
        raise RequestNotEditableError()

    ride.pickup_time = pickup_time
    ride.pickup_location = pickup_location
    ride.destination = destination
    ride.notes = notes or None
    ride.save(update_fields=["pickup_time", "pickup_location", "destination", "notes", "updated_at"])

    logger.info("Ride request %s details updated", ride.id)

    return RideResult(
        success=True,
        ride=ride,
        message="Request updated successfully.",
        notification=notification,
    )


@transaction.atomic
def cancel_ride_request(request_id) -> RideResult:
    """
    Cancel a request and release its driver.

    Raises:
        RequestNotFoundError: If the request does not exist
        RequestTerminalError: If the request is already Completed or Cancelled
    """
    ride = _lock_request(request_id)

    if is_terminal(ride.status):
        raise RequestTerminalError()

    return _cancel_locked(ride)


# ===================== Driver Operations =====================

@transaction.atomic
def transition_request_status(request_id, new_status: str) -> RideResult:
    """
    Move a request along the state machine. The only place status is written.

    Raises:
        RequestNotFoundError: If the request does not exist
        InvalidStatusError: If new_status is not a known status
        RequestTerminalError: If the request is already terminal
        IllegalTransitionError: If new_status is not reachable
    """
    ride = _lock_request(request_id)

    ensure_transition(ride.status, new_status)

    if new_status == RideRequest.CANCELLED:
        return _cancel_locked(ride)

    previous = ride.status
    ride.status = new_status
    ride.save(update_fields=["status", "updated_at"])

    logger.info("Ride request %s: %s -> %s", ride.id, previous, new_status)

    return RideResult(
        success=True,
        ride=ride,
        message="Ride status updated successfully.",
        extra={"previous_status": previous},
    )


# ===================== Queries =====================

def get_ride_request(request_id) -> RideRequest:
    try:
        return RideRequest.objects.select_related(
            "student__user", "student__residence", "driver__user"
        ).get(id=request_id)
    except RideRequest.DoesNotExist:
        raise RequestNotFoundError()


def get_student_requests(student, status: Optional[str] = None) -> QuerySet:
    qs = RideRequest.objects.filter(student=student).select_related("driver__user")
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


def get_driver_active_requests(driver) -> QuerySet:
    """Requests a driver still has to act on, soonest pickup first."""
    return (
        RideRequest.objects
        .filter(driver=driver, status__in=ACTIVE_STATUSES)
        .select_related("student__user", "student__residence")
        .order_by("pickup_time")
    )


def count_driver_completed_today(driver_id) -> int:
    return RideRequest.objects.filter(
        driver_id=driver_id,
        status=RideRequest.COMPLETED,
        updated_at__date=timezone.localdate(),
    ).count()


# ===================== Helper Functions =====================

def _cancel_locked(ride: RideRequest) -> RideResult:
    """Cancel an already locked, non-terminal request."""
    notification = emit_status_notification(ride)

    previous = ride.status
    ride.status = RideRequest.CANCELLED
    ride.save(update_fields=["status", "updated_at"])

    had_driver = ride.driver_id is not None
    if had_driver:
        release_driver(ride.driver_id)

    logger.info("Ride request %s cancelled (was %s)", ride.id, previous)

    return RideResult(
        success=True,
        ride=ride,
        message="Request cancelled successfully.",
        notification=notification,
        extra={"was_assigned": had_driver, "previous_status": previous},
    )
