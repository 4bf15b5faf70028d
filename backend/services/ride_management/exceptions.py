"""Custom exceptions for ride management."""


class RideServiceError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""
    status_code = 400
    default_message = "Ride operation failed"

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ProfileNotFoundError(RideServiceError):
    """Raised when the caller has no Profile row."""
    status_code = 404
    default_message = "Profile not found"


class DriverProfileNotFoundError(RideServiceError):
    """Raised when the caller has not completed driver onboarding."""
    status_code = 404
    default_message = "Driver vehicle profile not found"


class RideNotFoundError(RideServiceError):
    """Raised when a ride does not exist or is not visible to the caller."""
    status_code = 404
    default_message = "Ride not found"


class RideUnavailableError(RideServiceError):
    """Raised when a ride is not in the state the operation needs."""
    status_code = 409
    default_message = "Ride not found or already accepted"


class RideValidationError(RideServiceError):
    """Raised for missing or malformed ride input."""
    status_code = 400
    default_message = "Invalid ride data"
