"""
Read-only statistics for dashboards and the admin reports page.

Nothing here is stored: averages, earnings and counts are aggregated in
SQL on every read.
"""

from datetime import timedelta

from django.conf import settings
from django.db.models import Avg, Count, Q
from django.db.models.functions import ExtractMonth, TruncDate
from django.utils import timezone

from drivers.models import DriverProfile
from rides.models import RideRequest
from students.models import Student
from vehicles.models import Vehicle
from services.ride_management import ACTIVE_STATUSES, count_driver_completed_today
from services.ride_management.exceptions import DriverNotFoundError, StudentNotFoundError

# Rating 0 is a legacy "unset" marker and must not drag averages down
RATED = Q(rating__gte=1)


def _fare():
    return getattr(settings, "UNILIFT_FARE_PER_RIDE", 50)


def _round(value):
    return round(float(value), 2) if value is not None else None


def _ensure_driver(driver_id):
    if not DriverProfile.objects.filter(id=driver_id).exists():
        raise DriverNotFoundError()


def get_driver_stats(driver_id) -> dict:
    """All-time totals for one driver."""
    _ensure_driver(driver_id)

    totals = RideRequest.objects.filter(
        driver_id=driver_id,
        status=RideRequest.COMPLETED,
    ).aggregate(
        total_rides=Count("id"),
        rated_rides=Count("id", filter=RATED),
        average_rating=Avg("rating", filter=RATED),
    )

    return {
        "driver_id": int(driver_id),
        "total_rides": totals["total_rides"],
        "rated_rides": totals["rated_rides"],
        "average_rating": _round(totals["average_rating"]),
        "total_earnings": totals["total_rides"] * _fare(),
        "completed_today": count_driver_completed_today(driver_id),
    }


def get_driver_monthly_rides(driver_id, year: int) -> list:
    """Completed rides, earnings and average rating per calendar month of `year`."""
    _ensure_driver(driver_id)

    rows = (
        RideRequest.objects
        .filter(driver_id=driver_id, status=RideRequest.COMPLETED, created_at__year=year)
        .annotate(month=ExtractMonth("created_at"))
        .values("month")
        .annotate(rides=Count("id"), average_rating=Avg("rating", filter=RATED))
        .order_by("month")
    )
    by_month = {row["month"]: row for row in rows}

    fare = _fare()
    months = []
    for month in range(1, 13):
        row = by_month.get(month)
        rides = row["rides"] if row else 0
        months.append({
            "month": month,
            "rides": rides,
            "earnings": rides * fare,
            "average_rating": _round(row["average_rating"]) if row else None,
        })
    return months


def get_student_stats(student_id) -> dict:
    if not Student.objects.filter(id=student_id).exists():
        raise StudentNotFoundError()

    totals = RideRequest.objects.filter(student_id=student_id).aggregate(
        total_rides=Count("id", filter=Q(status=RideRequest.COMPLETED)),
        active_requests=Count("id", filter=Q(status__in=ACTIVE_STATUSES)),
        cancelled_requests=Count("id", filter=Q(status=RideRequest.CANCELLED)),
        average_rating=Avg("rating", filter=Q(status=RideRequest.COMPLETED) & RATED),
    )

    return {
        "student_id": int(student_id),
        "total_rides": totals["total_rides"],
        "active_requests": totals["active_requests"],
        "cancelled_requests": totals["cancelled_requests"],
        "average_rating": _round(totals["average_rating"]),
    }


def get_admin_overview() -> dict:
    """Headline numbers for the admin dashboard."""
    today = timezone.localdate()
    week_start = today - timedelta(days=6)

    by_status = dict(
        RideRequest.objects.values_list("status").annotate(total=Count("id")).order_by()
    )
    vehicles = Vehicle.objects.aggregate(
        total=Count("id"),
        assigned=Count("id", filter=Q(assigned=Vehicle.ASSIGNED)),
    )

    daily = dict(
        RideRequest.objects
        .filter(created_at__date__gte=week_start)
        .annotate(day=TruncDate("created_at"))
        .values_list("day")
        .annotate(total=Count("id"))
        .order_by()
    )
    last_seven_days = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        last_seven_days.append({"date": day.isoformat(), "rides": daily.get(day, 0)})

    return {
        "total_students": Student.objects.count(),
        "total_drivers": DriverProfile.objects.count(),
        "available_drivers": DriverProfile.objects.filter(
            availability_status=DriverProfile.AVAILABLE
        ).count(),
        "total_vehicles": vehicles["total"],
        "assigned_vehicles": vehicles["assigned"],
        "pending_requests": by_status.get(RideRequest.PENDING, 0),
        "active_requests": (
            by_status.get(RideRequest.ASSIGNED, 0) + by_status.get(RideRequest.IN_PROGRESS, 0)
        ),
        "completed_today": RideRequest.objects.filter(
            status=RideRequest.COMPLETED,
            updated_at__date=today,
        ).count(),
        "requests_by_status": {
            value: by_status.get(value, 0) for value, _ in RideRequest.STATUS_CHOICES
        },
        "rides_last_7_days": last_seven_days,
    }
