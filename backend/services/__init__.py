"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP layer.

Modules:
    - ride_management: Ride request lifecycle and state machine
    - assignment: Driver and vehicle assignment
    - ratings: One-shot ride ratings
    - notifications: Notified-flag tracker for polling clients
"""

# Expose commonly used functions at package level
from .ride_management import (
    create_ride_request,
    update_request_fields,
    transition_request_status,
    cancel_ride_request,
    RideManagementError,
    NoDriversAvailableError,
)
from .assignment import (
    claim_available_driver,
    assign_vehicle_to_new_driver,
    release_vehicle_from_driver,
)
from .ratings import submit_rating
from .notifications import (
    emit_status_notification,
    collect_status_notifications,
    collect_completion_notifications,
    mark_notified,
)

__all__ = [
    # Ride management
    "create_ride_request",
    "update_request_fields",
    "transition_request_status",
    "cancel_ride_request",
    "RideManagementError",
    "NoDriversAvailableError",
    # Assignment
    "claim_available_driver",
    "assign_vehicle_to_new_driver",
    "release_vehicle_from_driver",
    # Ratings
    "submit_rating",
    # Notifications
    "emit_status_notification",
    "collect_status_notifications",
    "collect_completion_notifications",
    "mark_notified",
]
