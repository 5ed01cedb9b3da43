import logging

from django.db import transaction

from vehicles.models import Vehicle
from services.ride_management.exceptions import DuplicateRecordError, VehicleNotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_PLATE = "A vehicle with this plate number already exists."


def _check_plate(plate_number, exclude_id=None):
    vehicles = Vehicle.objects.filter(plate_number__iexact=plate_number)
    if exclude_id is not None:
        vehicles = vehicles.exclude(id=exclude_id)
    if vehicles.exists():
        raise DuplicateRecordError(DUPLICATE_PLATE)


def get_vehicle(vehicle_id) -> Vehicle:
    try:
        return Vehicle.objects.select_related("driver__user").get(id=vehicle_id)
    except Vehicle.DoesNotExist:
        raise VehicleNotFoundError()


def list_vehicles():
    return Vehicle.objects.select_related("driver__user").order_by("id")


@transaction.atomic
def create_vehicle(model: str, plate_number: str, capacity: int) -> Vehicle:
    """New vehicles join the fleet unassigned."""
    _check_plate(plate_number)
    vehicle = Vehicle.objects.create(model=model, plate_number=plate_number, capacity=capacity)
    logger.info("Vehicle %s (%s) added to the fleet", vehicle.id, plate_number)
    return vehicle


@transaction.atomic
def update_vehicle(vehicle_id, **fields) -> Vehicle:
    try:
        vehicle = Vehicle.objects.select_for_update().get(id=vehicle_id)
    except Vehicle.DoesNotExist:
        raise VehicleNotFoundError()

    if "plate_number" in fields:
        _check_plate(fields["plate_number"], exclude_id=vehicle.id)

    for name in ("model", "plate_number", "capacity"):
        if name in fields:
            setattr(vehicle, name, fields[name])
    vehicle.save()

    logger.info("Vehicle %s updated", vehicle.id)
    return vehicle


@transaction.atomic
def delete_vehicle(vehicle_id) -> None:
    deleted, _ = Vehicle.objects.filter(id=vehicle_id).delete()
    if not deleted:
        raise VehicleNotFoundError()
    logger.info("Vehicle %s deleted", vehicle_id)
