"""
Rating subsystem.

A completed ride can be rated exactly once with an integer from 1 to 5.
Averages are never stored; reports aggregate them on read.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from rides.models import RideRequest
from services.ride_management.exceptions import (
    AlreadyRatedError,
    InvalidRatingError,
    RequestNotCompletedError,
    RequestNotFoundError,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(value) -> int:
    """Accept only real integers in range; bools, floats and strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRatingError()
    if not MIN_RATING <= value <= MAX_RATING:
        raise InvalidRatingError()
    return value


@transaction.atomic
def submit_rating(request_id, rating) -> RideRequest:
    """
    Rate a completed ride.

    Raises:
        InvalidRatingError: rating is not an int in [1, 5]
        RequestNotFoundError: request does not exist
        RequestNotCompletedError: request is not Completed
        AlreadyRatedError: request already carries a rating
    """
    rating = validate_rating(rating)

    try:
        ride = RideRequest.objects.select_for_update().get(id=request_id)
    except RideRequest.DoesNotExist:
        raise RequestNotFoundError()

    if ride.status != RideRequest.COMPLETED:
        raise RequestNotCompletedError()

    if ride.is_rated:
        raise AlreadyRatedError()

    now = timezone.now()
    updated = (
        RideRequest.objects
        .filter(id=ride.id, status=RideRequest.COMPLETED)
        .filter(Q(rating__isnull=True) | Q(rating=0))
        .update(rating=rating, updated_at=now)
    )
    if not updated:
        raise AlreadyRatedError()

    ride.rating = rating
    ride.updated_at = now

    logger.info("Ride request %s rated %d", ride.id, rating)
    return ride
