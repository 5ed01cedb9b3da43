"""Custom exceptions for ride management.

Each error carries the HTTP status the API layer answers with and a
default user-facing message.
"""


class RideManagementError(Exception):
    """Base class for business-rule failures."""
    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ----- not found (404) -----

class RequestNotFoundError(RideManagementError):
    """Raised when a ride request cannot be found."""
    status_code = 404
    default_message = "Request not found."


class StudentNotFoundError(RideManagementError):
    status_code = 404
    default_message = "Student not found."


class DriverNotFoundError(RideManagementError):
    status_code = 404
    default_message = "Driver not found."


class VehicleNotFoundError(RideManagementError):
    status_code = 404
    default_message = "Vehicle not found."


# ----- validation (400) -----

class InvalidRatingError(RideManagementError):
    """Raised when a rating is not an integer between 1 and 5."""
    status_code = 400
    default_message = "Invalid rating value. Must be a number between 1 and 5."


class InvalidStatusError(RideManagementError):
    """Raised when a status value is not one of the known statuses."""
    status_code = 400
    default_message = "Invalid status value."


# ----- state conflicts (403 / 409) -----

class RequestNotEditableError(RideManagementError):
    """Raised when trip details are edited after the ride has started."""
    status_code = 403
    default_message = "Request cannot be updated as its status is no longer 'Pending' or 'Assigned'."


class RequestTerminalError(RideManagementError):
    """Raised when a completed or cancelled request is modified."""
    status_code = 403
    default_message = "Request is already completed or cancelled and cannot be modified."


class RequestNotCompletedError(RideManagementError):
    """Raised when a ride that has not been completed is rated."""
    status_code = 403
    default_message = "Request not completed."


class AlreadyRatedError(RideManagementError):
    status_code = 409
    default_message = "This ride has already been rated."


class IllegalTransitionError(RideManagementError):
    """Raised when the requested status is not reachable from the current one."""
    status_code = 409
    default_message = "Illegal status transition."


class VehicleAlreadyAssignedError(RideManagementError):
    status_code = 409
    default_message = "This vehicle is already assigned to a driver."


class DriverBusyError(RideManagementError):
    """Raised when a driver with an open request is put back in the pool."""
    status_code = 409
    default_message = "Driver still has an open ride request and cannot be made available."


class DuplicateRecordError(RideManagementError):
    """Raised when a unique field (email, license, plate...) is already taken."""
    status_code = 409
    default_message = "A record with these details already exists."


# ----- resource exhaustion (503) -----

class NoDriversAvailableError(RideManagementError):
    """Raised when no driver is available for a new request."""
    status_code = 503
    default_message = "No drivers are currently available."
