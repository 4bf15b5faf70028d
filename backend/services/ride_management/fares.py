"""Advisory fare estimate shown when a ride is requested."""

import random

from .exceptions import RideValidationError

BASE_FARES = {
    'bike': 30,
    'auto': 50,
    'car': 80,
}

# Width of the random spread added on top of the base fare
FARE_SPREAD = 100


def estimate_fare(vehicle_type: str, rng=random) -> int:
    """
    Return an integer fare in ``[base, base + FARE_SPREAD)`` for the vehicle type.

    Not reproducible and not used for accounting; the driver enters the
    final fare when completing the ride.

    Raises:
        RideValidationError: for any vehicle type other than bike/auto/car
    """
    try:
        base = BASE_FARES[vehicle_type]
    except (KeyError, TypeError):
        raise RideValidationError(
            f"Unsupported vehicle type: {vehicle_type!r}",
            errors={"vehicle_type": [f"Must be one of: {', '.join(BASE_FARES)}"]},
        )
    return base + int(rng.random() * FARE_SPREAD)
