import logging
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from drivers.models import DriverProfile
from vehicles.models import Vehicle
from services.assignment import (
    assign_vehicle_to_new_driver,
    ensure_driver_can_become_available,
    release_vehicle_from_driver,
)
from services.notifications import collect_status_notifications
from services.ride_management import get_driver_active_requests
from services.ride_management.exceptions import DriverNotFoundError, DuplicateRecordError

User = get_user_model()

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name", "email", "phone_number")


def _check_unique(email=None, license=None, phone_number=None, exclude_driver=None):
    """Email, license and contact number must each belong to one driver only."""
    if email is not None:
        users = User.objects.filter(email__iexact=email)
        if exclude_driver is not None:
            users = users.exclude(id=exclude_driver.user_id)
        if users.exists():
            raise DuplicateRecordError("A user with this email already exists.")

    drivers = DriverProfile.objects.all()
    if exclude_driver is not None:
        drivers = drivers.exclude(id=exclude_driver.id)

    if license is not None and drivers.filter(license=license).exists():
        raise DuplicateRecordError("A driver with this license already exists.")

    if phone_number is not None and drivers.filter(user__phone_number=phone_number).exists():
        raise DuplicateRecordError("A driver with this contact number already exists.")


def get_driver(driver_id) -> DriverProfile:
    try:
        return DriverProfile.objects.select_related("user").get(id=driver_id)
    except DriverProfile.DoesNotExist:
        raise DriverNotFoundError()


def list_drivers():
    return DriverProfile.objects.select_related("user").prefetch_related("vehicles").order_by("id")


@transaction.atomic
def create_driver(
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    license: str,
    availability_status: str = DriverProfile.NOT_AVAILABLE,
    password: Optional[str] = None,
) -> Tuple[DriverProfile, Optional[Vehicle]]:
    """
    Create a driver account and hand them the first free vehicle.

    A driver created while the fleet is fully assigned simply has no vehicle.

    Returns:
        (driver, vehicle or None)

    Raises:
        DuplicateRecordError: If the email, license or contact number is taken
    """
    _check_unique(email=email, license=license, phone_number=phone_number)

    user = User.objects.create_user(
        username=email,
        email=email,
        password=password or settings.UNILIFT_DEFAULT_PASSWORD,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        role=User.DRIVER,
    )
    driver = DriverProfile.objects.create(
        user=user,
        license=license,
        availability_status=availability_status,
    )

    vehicle = assign_vehicle_to_new_driver(driver)

    logger.info(
        "Driver %s created (%s), vehicle %s",
        driver.id, availability_status, vehicle.id if vehicle else "unassigned"
    )
    return driver, vehicle


@transaction.atomic
def update_driver(driver_id, **fields) -> DriverProfile:
    """Partial update of account and profile details."""
    try:
        driver = DriverProfile.objects.select_for_update().select_related("user").get(id=driver_id)
    except DriverProfile.DoesNotExist:
        raise DriverNotFoundError()

    _check_unique(
        email=fields.get("email"),
        license=fields.get("license"),
        phone_number=fields.get("phone_number"),
        exclude_driver=driver,
    )

    user = driver.user
    changed = [name for name in USER_FIELDS if name in fields]
    for name in changed:
        setattr(user, name, fields[name])
    if "email" in fields:
        user.username = fields["email"]
        changed.append("username")
    if fields.get("password"):
        user.set_password(fields["password"])
        changed.append("password")
    if changed:
        user.save(update_fields=changed)

    if "license" in fields:
        driver.license = fields["license"]
    if "availability_status" in fields:
        if (
            fields["availability_status"] == DriverProfile.AVAILABLE
            and not driver.is_available
        ):
            ensure_driver_can_become_available(driver)
        driver.availability_status = fields["availability_status"]
    driver.save()

    logger.info("Driver %s updated", driver.id)
    return driver


@transaction.atomic
def delete_driver(driver_id) -> None:
    """
    Free the driver's vehicle, then remove the account. Their requests go
    with them by cascade.
    """
    try:
        driver = DriverProfile.objects.select_for_update().get(id=driver_id)
    except DriverProfile.DoesNotExist:
        raise DriverNotFoundError()

    release_vehicle_from_driver(driver)

    user_id = driver.user_id
    User.objects.filter(id=user_id).delete()

    logger.info("Driver %s deleted (user %s)", driver_id, user_id)


def get_driver_dashboard(driver: DriverProfile) -> dict:
    """
    The driver's polling endpoint: their queue of open requests plus a
    notice for each one still unflagged. Reading it never sets `notified`.
    """
    from drivers.serializers import DriverSerializer
    from reports.services import get_driver_stats
    from rides.serializers import RideRequestSerializer

    active = list(get_driver_active_requests(driver))
    notifications = collect_status_notifications(active)

    return {
        "driver": DriverSerializer(driver).data,
        "stats": get_driver_stats(driver.id),
        "active_requests": RideRequestSerializer(active, many=True).data,
        "notifications": notifications,
    }
