"""
Pick and claim drivers for ride requests.

Selection is greedy and non-optimizing: the available driver with the
lowest id wins. Claiming is a compare-and-swap on `availability_status`
so two concurrent requests can never take the same driver.
"""

import logging

from django.db import transaction

from drivers.models import DriverProfile
from rides.models import RideRequest
from services.ride_management.exceptions import (
    DriverBusyError,
    DriverNotFoundError,
    InvalidStatusError,
    NoDriversAvailableError,
)
from services.ride_management.transitions import ACTIVE_STATUSES

logger = logging.getLogger(__name__)

# Candidates tried before giving up when other transactions keep winning
MAX_CLAIM_ATTEMPTS = 5


def _next_available_driver(exclude_ids):
    return (
        DriverProfile.objects
        .select_for_update(skip_locked=True)
        .filter(availability_status=DriverProfile.AVAILABLE)
        .exclude(id__in=exclude_ids)
        .order_by("id")
        .first()
    )


@transaction.atomic
def claim_available_driver() -> DriverProfile:
    """
    Flip one available driver to Not Available and return it.

    Must run inside the caller's transaction so the claim rolls back
    together with the request insert.

    Raises:
        NoDriversAvailableError: If no driver could be claimed
    """
    tried = []
    for _ in range(MAX_CLAIM_ATTEMPTS):
        candidate = _next_available_driver(tried)
        if candidate is None:
            break

        claimed = DriverProfile.objects.filter(
            id=candidate.id,
            availability_status=DriverProfile.AVAILABLE,
        ).update(availability_status=DriverProfile.NOT_AVAILABLE)

        if claimed:
            candidate.availability_status = DriverProfile.NOT_AVAILABLE
            logger.info("Claimed driver %s for a new ride request", candidate.id)
            return candidate

        # Lost the race for this driver, try the next one
        logger.debug("Driver %s was claimed concurrently", candidate.id)
        tried.append(candidate.id)

    raise NoDriversAvailableError()


def release_driver(driver_id) -> bool:
    """Put a driver back in the available pool. Returns False if already available."""
    released = DriverProfile.objects.filter(id=driver_id).exclude(
        availability_status=DriverProfile.AVAILABLE
    ).update(availability_status=DriverProfile.AVAILABLE)

    if released:
        logger.info("Released driver %s", driver_id)
    return bool(released)


def ensure_driver_can_become_available(driver: DriverProfile) -> None:
    """
    A driver with an open request stays out of the pool until that request
    ends. Call with the driver row locked.

    Raises:
        DriverBusyError: If a Pending, Assigned or In_progress request is theirs
    """
    if RideRequest.objects.filter(driver=driver, status__in=ACTIVE_STATUSES).exists():
        raise DriverBusyError()


@transaction.atomic
def set_driver_availability(driver_id, status: str) -> DriverProfile:
    """Explicit availability toggle (driver going on/off shift)."""
    valid = [value for value, _ in DriverProfile.STATUS_CHOICES]
    if status not in valid:
        raise InvalidStatusError("Invalid status. Must be 'Available' or 'Not Available'.")

    try:
        driver = DriverProfile.objects.select_for_update().get(id=driver_id)
    except DriverProfile.DoesNotExist:
        raise DriverNotFoundError()

    if status == DriverProfile.AVAILABLE:
        ensure_driver_can_become_available(driver)

    driver.availability_status = status
    driver.save(update_fields=["availability_status", "updated_at"])

    logger.info("Driver %s availability updated to %s", driver_id, status)
    return driver
