"""
Ride management service - Core ride request lifecycle operations.

This module handles:
    - Creating ride requests (with driver assignment)
    - Editing trip details before the ride starts
    - Moving requests along the status state machine
    - Cancelling requests and releasing drivers
    - Querying requests for students and drivers
"""

from .exceptions import (
    RideManagementError,
    RequestNotFoundError,
    StudentNotFoundError,
    DriverNotFoundError,
    VehicleNotFoundError,
    InvalidRatingError,
    InvalidStatusError,
    RequestNotEditableError,
    RequestTerminalError,
    RequestNotCompletedError,
    AlreadyRatedError,
    IllegalTransitionError,
    VehicleAlreadyAssignedError,
    DriverBusyError,
    DuplicateRecordError,
    NoDriversAvailableError,
)

from .transitions import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    EDITABLE_STATUSES,
    ACTIVE_STATUSES,
    can_transition,
    is_terminal,
)

from .ride_lifecycle import (
    RideResult,
    create_ride_request,
    update_request_fields,
    transition_request_status,
    cancel_ride_request,
    get_ride_request,
    get_student_requests,
    get_driver_active_requests,
    count_driver_completed_today,
)

__all__ = [
    # Lifecycle operations
    "RideResult",
    "create_ride_request",
    "update_request_fields",
    "transition_request_status",
    "cancel_ride_request",
    "get_ride_request",
    "get_student_requests",
    "get_driver_active_requests",
    "count_driver_completed_today",
    # State machine
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "EDITABLE_STATUSES",
    "ACTIVE_STATUSES",
    "can_transition",
    "is_terminal",
    # Exceptions
    "RideManagementError",
    "RequestNotFoundError",
    "StudentNotFoundError",
    "DriverNotFoundError",
    "VehicleNotFoundError",
    "InvalidRatingError",
    "InvalidStatusError",
    "RequestNotEditableError",
    "RequestTerminalError",
    "RequestNotCompletedError",
    "AlreadyRatedError",
    "IllegalTransitionError",
    "VehicleAlreadyAssignedError",
    "DriverBusyError",
    "DuplicateRecordError",
    "NoDriversAvailableError",
]
