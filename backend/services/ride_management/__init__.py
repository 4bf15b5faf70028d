"""
Ride management service - Core ride lifecycle operations.

This module handles:
    - Estimating fares
    - Creating ride requests
    - Accepting, starting and completing rides
    - Cancelling rides
    - Querying rides per customer / driver
"""

from .fares import estimate_fare, BASE_FARES

from .ride_lifecycle import (
    RideResult,
    create_ride,
    accept_ride,
    start_ride,
    complete_ride,
    cancel_ride,
    get_ride_for_user,
    list_customer_rides,
    list_available_rides,
    list_driver_rides,
)

from .exceptions import (
    RideServiceError,
    ProfileNotFoundError,
    DriverProfileNotFoundError,
    RideNotFoundError,
    RideUnavailableError,
    RideValidationError,
)

__all__ = [
    # Fares
    "estimate_fare",
    "BASE_FARES",
    # Lifecycle operations
    "RideResult",
    "create_ride",
    "accept_ride",
    "start_ride",
    "complete_ride",
    "cancel_ride",
    "get_ride_for_user",
    "list_customer_rides",
    "list_available_rides",
    "list_driver_rides",
    # Exceptions
    "RideServiceError",
    "ProfileNotFoundError",
    "DriverProfileNotFoundError",
    "RideNotFoundError",
    "RideUnavailableError",
    "RideValidationError",
]
