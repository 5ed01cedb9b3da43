"""
Ride request state machine.

    Pending ──> Assigned ──> In_progress ──> Completed
       │            │             │
       └────────────┴─────────────┴──> Cancelled

Completed and Cancelled are terminal. Every move into Cancelled releases
the driver; completing a ride does not.
"""

from rides.models import RideRequest

from .exceptions import IllegalTransitionError, InvalidStatusError, RequestTerminalError

ALL_STATUSES = tuple(value for value, _ in RideRequest.STATUS_CHOICES)

ALLOWED_TRANSITIONS = {
    RideRequest.PENDING: frozenset({RideRequest.ASSIGNED, RideRequest.CANCELLED}),
    RideRequest.ASSIGNED: frozenset({RideRequest.IN_PROGRESS, RideRequest.CANCELLED}),
    RideRequest.IN_PROGRESS: frozenset({RideRequest.COMPLETED, RideRequest.CANCELLED}),
    RideRequest.COMPLETED: frozenset(),
    RideRequest.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({RideRequest.COMPLETED, RideRequest.CANCELLED})

# Trip details may only change before the ride starts
EDITABLE_STATUSES = frozenset({RideRequest.PENDING, RideRequest.ASSIGNED})

ACTIVE_STATUSES = (RideRequest.PENDING, RideRequest.ASSIGNED, RideRequest.IN_PROGRESS)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, new: str) -> None:
    """Raise unless `current -> new` is an edge of the state machine."""
    if new not in ALL_STATUSES:
        raise InvalidStatusError(
            f"Invalid status value. Must be one of: {', '.join(ALL_STATUSES)}."
        )
    if is_terminal(current):
        raise RequestTerminalError()
    if not can_transition(current, new):
        raise IllegalTransitionError(
            f"Cannot change status from '{current}' to '{new}'."
        )
