from django.db.models import Q

from rides.models import RideRequest
from rides.serializers import RideRequestSerializer
from reports.services import get_student_stats
from services.notifications import collect_completion_notifications
from services.ride_management import ACTIVE_STATUSES, get_student_requests
from students.serializers import StudentSerializer

RECENT_LIMIT = 10


def get_student_dashboard(student) -> dict:
    """
    Everything the student home screen polls for.

    Reading the dashboard consumes pending "ride completed" notifications:
    each completed request announces itself once, then goes quiet.
    """
    requests = get_student_requests(student)

    active = requests.filter(status__in=ACTIVE_STATUSES)
    awaiting_rating = requests.filter(status=RideRequest.COMPLETED).filter(
        Q(rating__isnull=True) | Q(rating=0)
    )

    return {
        "student": StudentSerializer(student).data,
        "stats": get_student_stats(student.id),
        "active_requests": RideRequestSerializer(active, many=True).data,
        "awaiting_rating": RideRequestSerializer(awaiting_rating, many=True).data,
        "recent_requests": RideRequestSerializer(requests[:RECENT_LIMIT], many=True).data,
        "notifications": collect_completion_notifications(student),
    }
