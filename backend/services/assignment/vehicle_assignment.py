"""
Vehicle <-> driver assignment.

A vehicle's `assigned` flag must always agree with its `driver` column,
so every write here sets both in one statement.
"""

import logging
from typing import Optional

from django.db import transaction

from drivers.models import DriverProfile
from vehicles.models import Vehicle
from services.ride_management.exceptions import (
    DriverNotFoundError,
    VehicleAlreadyAssignedError,
    VehicleNotFoundError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def assign_vehicle_to_new_driver(driver: DriverProfile) -> Optional[Vehicle]:
    """
    Give a freshly created driver the first free vehicle.

    Returns:
        The assigned Vehicle, or None when the fleet has no free vehicle
        (the driver simply stays unassigned).
    """
    free_vehicles = (
        Vehicle.objects
        .select_for_update(skip_locked=True)
        .filter(assigned=Vehicle.UNASSIGNED, driver__isnull=True)
        .order_by("id")
    )

    for vehicle in free_vehicles[:5]:
        taken = Vehicle.objects.filter(
            id=vehicle.id,
            assigned=Vehicle.UNASSIGNED,
        ).update(driver=driver, assigned=Vehicle.ASSIGNED)
        if taken:
            vehicle.driver = driver
            vehicle.assigned = Vehicle.ASSIGNED
            logger.info("Assigned vehicle %s to driver %s", vehicle.id, driver.id)
            return vehicle

    logger.info("No free vehicle for driver %s; left unassigned", driver.id)
    return None


@transaction.atomic
def assign_vehicle(vehicle_id, driver_id) -> Vehicle:
    """Admin assignment of a specific free vehicle to a driver."""
    try:
        vehicle = Vehicle.objects.select_for_update().get(id=vehicle_id)
    except Vehicle.DoesNotExist:
        raise VehicleNotFoundError()

    try:
        driver = DriverProfile.objects.get(id=driver_id)
    except DriverProfile.DoesNotExist:
        raise DriverNotFoundError()

    if vehicle.driver_id and vehicle.driver_id != driver.id:
        raise VehicleAlreadyAssignedError()

    vehicle.driver = driver
    vehicle.save(update_fields=["driver", "updated_at"])

    logger.info("Assigned vehicle %s to driver %s", vehicle.id, driver.id)
    return vehicle


def release_vehicle_from_driver(driver) -> int:
    """Detach every vehicle held by the driver. Returns how many were released."""
    driver_id = getattr(driver, "id", driver)
    released = Vehicle.objects.filter(driver_id=driver_id).update(
        driver=None,
        assigned=Vehicle.UNASSIGNED,
    )
    if released:
        logger.info("Released %d vehicle(s) from driver %s", released, driver_id)
    return released
