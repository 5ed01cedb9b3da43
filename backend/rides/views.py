import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.models import User
from drivers.models import DriverProfile
from students.models import Student
from .models import RideRequest
from .serializers import (
    RideRequestSerializer,
    RideRequestCreateSerializer,
    RideRequestEditSerializer,
    RideStatusSerializer,
    RideRatingSerializer,
)

# Import from services layer
from services.ride_management import (
    create_ride_request,
    update_request_fields,
    transition_request_status,
    cancel_ride_request,
    get_ride_request,
    get_student_requests,
    get_driver_active_requests,
    count_driver_completed_today,
)
from services.ratings import submit_rating
from services.notifications import mark_notified

logger = logging.getLogger(__name__)

FORBIDDEN_MESSAGE = 'You do not have permission to access this request.'


def _forbidden(message=FORBIDDEN_MESSAGE):
    return Response({'error': message}, status=status.HTTP_403_FORBIDDEN)


def _student_for(user):
    return Student.objects.filter(user=user).first()


def _driver_for(user):
    return DriverProfile.objects.filter(user=user).first()


def _can_access(user, ride, student=False, driver=False):
    """Admins always; otherwise the owning student and/or the assigned driver."""
    if user.is_admin_role:
        return True
    if student and user.role == User.STUDENT:
        profile = _student_for(user)
        return profile is not None and ride.student_id == profile.id
    if driver and user.role == User.DRIVER:
        profile = _driver_for(user)
        return profile is not None and ride.driver_id == profile.id
    return False


def _ride_response(result, extra=None, status_code=status.HTTP_200_OK):
    payload = {
        'message': result.message,
        'request': RideRequestSerializer(result.ride).data,
        'notification': result.notification,
    }
    if extra:
        payload.update(extra)
    return Response(payload, status=status_code)


# ==================== Collection ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ride_requests(request):
    if request.method == 'POST':
        return _create_request(request)

    user = request.user
    status_filter = request.query_params.get('status')

    if user.is_admin_role:
        qs = RideRequest.objects.select_related('student__user', 'student__residence', 'driver__user')
        if status_filter:
            qs = qs.filter(status=status_filter)
    elif user.role == User.STUDENT:
        profile = _student_for(user)
        if profile is None:
            return Response({'error': 'Student profile not found'}, status=status.HTTP_404_NOT_FOUND)
        qs = get_student_requests(profile, status_filter)
    elif user.role == User.DRIVER:
        profile = _driver_for(user)
        if profile is None:
            return Response({'error': 'Driver profile not found'}, status=status.HTTP_404_NOT_FOUND)
        qs = get_driver_active_requests(profile)
    else:
        return _forbidden()

    return Response(RideRequestSerializer(qs, many=True).data)


def _create_request(request):
    """Student books a ride; the first available driver is claimed on the spot."""
    user = request.user
    if user.role == User.DRIVER:
        return _forbidden('Only students can create ride requests')

    serializer = RideRequestCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    student_id = data.get('student_id')
    if not user.is_admin_role:
        profile = _student_for(user)
        if profile is None:
            return Response({'error': 'Student profile not found'}, status=status.HTTP_404_NOT_FOUND)
        if student_id is not None and student_id != profile.id:
            return _forbidden('You can only request rides for yourself')
        student_id = profile.id
    elif student_id is None:
        return Response({'error': 'student_id is required'}, status=status.HTTP_400_BAD_REQUEST)

    result = create_ride_request(
        student_id=student_id,
        pickup_location=data['pickup_location'],
        pickup_time=data['pickup_time'],
        destination=data['destination'],
        notes=data.get('notes'),
    )

    return Response({
        'message': result.message,
        'requestId': result.ride.id,
        'driverId': result.extra['driver_id'],
        'request': RideRequestSerializer(result.ride).data,
    }, status=status.HTTP_201_CREATED)


# ==================== Single request ====================

@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def ride_request_detail(request, request_id):
    ride = get_ride_request(request_id)
    user = request.user

    if request.method == 'GET':
        if not _can_access(user, ride, student=True, driver=True):
            return _forbidden()
        return Response(RideRequestSerializer(ride).data)

    if request.method == 'PATCH':
        return _change_status(request, ride)

    if request.method == 'DELETE':
        if not _can_access(user, ride, student=True):
            return _forbidden()
        result = cancel_ride_request(ride.id)
        return _ride_response(result)

    # PUT carries exactly one of three payload shapes
    variants = [key for key in ('status', 'rate') if key in request.data]
    if len(variants) > 1:
        return Response(
            {'error': 'Send either a status, a rating or trip details, not several.'},
            status=status.HTTP_400_BAD_REQUEST
        )

    if variants == ['status']:
        return _change_status(request, ride)

    if variants == ['rate']:
        return _rate(request, ride)

    if not _can_access(user, ride, student=True):
        return _forbidden()

    serializer = RideRequestEditSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = update_request_fields(
        ride.id,
        pickup_time=data['pickup_time'],
        pickup_location=data['pickup_location'],
        destination=data['destination'],
        notes=data.get('notes'),
    )
    return _ride_response(result)


def _change_status(request, ride):
    """Driver moves the ride along; every write goes through the state machine."""
    if not _can_access(request.user, ride, driver=True):
        return _forbidden()

    serializer = RideStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = transition_request_status(ride.id, serializer.validated_data['status'])
    return _ride_response(result)


def _rate(request, ride):
    if not _can_access(request.user, ride, student=True):
        return _forbidden()

    serializer = RideRatingSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    rated = submit_rating(ride.id, serializer.validated_data['rate'])
    return Response({
        'message': 'Rating submitted successfully.',
        'request': RideRequestSerializer(rated).data,
        'notification': None,
    })


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def rate_ride_request(request, request_id):
    """Dedicated rating endpoint: {"rate": 1..5}"""
    ride = get_ride_request(request_id)
    return _rate(request, ride)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def mark_request_notified(request, request_id):
    """Student dismisses the "ride completed" alert."""
    ride = get_ride_request(request_id)
    if not _can_access(request.user, ride, student=True):
        return _forbidden()

    if ride.status != RideRequest.COMPLETED:
        return Response(
            {'error': 'Only completed requests can be marked as notified.'},
            status=status.HTTP_400_BAD_REQUEST
        )

    changed = mark_notified(ride.id)
    return Response({
        'message': 'Request marked as notified.' if changed else 'Request was already notified.',
        'request_id': ride.id,
        'notified': True,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def completed_today(request):
    """Number of rides a driver completed today. Drivers default to themselves."""
    user = request.user
    driver_id = request.query_params.get('driver_id')

    if user.role == User.DRIVER and not user.is_admin_role:
        profile = _driver_for(user)
        if profile is None:
            return Response({'error': 'Driver profile not found'}, status=status.HTTP_404_NOT_FOUND)
        if driver_id and str(profile.id) != driver_id:
            return _forbidden('You can only view your own statistics')
        driver_id = profile.id
    elif not user.is_admin_role:
        return _forbidden()

    if not driver_id:
        return Response({'error': 'driver_id is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        driver_id = int(driver_id)
    except (TypeError, ValueError):
        return Response({'error': 'driver_id must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'driver_id': driver_id,
        'completed_today': count_driver_completed_today(driver_id),
    })
