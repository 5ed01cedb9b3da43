import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from rides.models import RideRequest
from students.models import ResAddress, Student
from services.assignment import release_driver
from services.ride_management import ACTIVE_STATUSES
from services.ride_management.exceptions import DuplicateRecordError, StudentNotFoundError

User = get_user_model()

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name", "email", "phone_number")
RESIDENCE_FIELDS = ("residence_name", "street_name", "house_number")


def _residence_for(residence_name, street_name, house_number) -> ResAddress:
    """Students at the same address share one residence row."""
    residence, created = ResAddress.objects.get_or_create(
        name=residence_name,
        street_name=street_name,
        house_number=house_number,
    )
    if created:
        logger.info("Created residence address %s", residence.id)
    return residence


def _check_unique(email=None, student_number=None, exclude_user_id=None, exclude_student_id=None):
    if email is not None:
        users = User.objects.filter(email__iexact=email)
        if exclude_user_id is not None:
            users = users.exclude(id=exclude_user_id)
        if users.exists():
            raise DuplicateRecordError("A user with this email already exists.")

    if student_number is not None:
        students = Student.objects.filter(student_number=student_number)
        if exclude_student_id is not None:
            students = students.exclude(id=exclude_student_id)
        if students.exists():
            raise DuplicateRecordError("A student with this student number already exists.")


def get_student(student_id) -> Student:
    try:
        return Student.objects.select_related("user", "residence").get(id=student_id)
    except Student.DoesNotExist:
        raise StudentNotFoundError()


def list_students():
    return Student.objects.select_related("user", "residence").order_by("id")


@transaction.atomic
def create_student(
    first_name: str,
    last_name: str,
    email: str,
    phone_number: str,
    student_number: str,
    residence_name: str,
    street_name: str,
    house_number: str,
    password: Optional[str] = None,
) -> Student:
    """
    Create the user account and student profile in one go.

    Admin-created accounts get UNILIFT_DEFAULT_PASSWORD; self-registration
    passes the password the student chose.

    Raises:
        DuplicateRecordError: If the email or student number is taken
    """
    _check_unique(email=email, student_number=student_number)

    residence = _residence_for(residence_name, street_name, house_number)

    user = User.objects.create_user(
        username=email,
        email=email,
        password=password or settings.UNILIFT_DEFAULT_PASSWORD,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        role=User.STUDENT,
    )
    student = Student.objects.create(
        user=user,
        student_number=student_number,
        residence=residence,
    )

    logger.info("Student %s created (user %s)", student.id, user.id)
    return student


@transaction.atomic
def update_student(student_id, **fields) -> Student:
    """
    Partial update. Residence fields are applied together, never one by one.
    """
    try:
        student = Student.objects.select_for_update().select_related("user").get(id=student_id)
    except Student.DoesNotExist:
        raise StudentNotFoundError()

    _check_unique(
        email=fields.get("email"),
        student_number=fields.get("student_number"),
        exclude_user_id=student.user_id,
        exclude_student_id=student.id,
    )

    user = student.user
    changed_user_fields = [name for name in USER_FIELDS if name in fields]
    for name in changed_user_fields:
        setattr(user, name, fields[name])
    if "email" in fields:
        user.username = fields["email"]
        changed_user_fields.append("username")
    if fields.get("password"):
        user.set_password(fields["password"])
        changed_user_fields.append("password")
    if changed_user_fields:
        user.save(update_fields=changed_user_fields)

    if "student_number" in fields:
        student.student_number = fields["student_number"]
    if all(name in fields for name in RESIDENCE_FIELDS):
        student.residence = _residence_for(*(fields[name] for name in RESIDENCE_FIELDS))
    student.save()

    logger.info("Student %s updated", student.id)
    return student


@transaction.atomic
def delete_student(student_id) -> None:
    """
    Remove a student, their account and (by cascade) their requests.
    Drivers still attached to the student's open requests go back to the pool.
    """
    try:
        student = Student.objects.select_for_update().get(id=student_id)
    except Student.DoesNotExist:
        raise StudentNotFoundError()

    open_requests = RideRequest.objects.filter(
        student=student,
        status__in=ACTIVE_STATUSES,
        driver__isnull=False,
    )
    for driver_id in set(open_requests.values_list("driver_id", flat=True)):
        release_driver(driver_id)

    user_id = student.user_id
    User.objects.filter(id=user_id).delete()

    logger.info("Student %s deleted (user %s)", student_id, user_id)
