import logging

from django.db import transaction

from drivers.models import DriverProfile
from realtime.notifications import notify_driver_availability

logger = logging.getLogger(__name__)


@transaction.atomic
def save_driver_profile(user, data: dict) -> tuple:
    """
    Create or update the caller's DriverProfile.

    Returns:
        (profile, created)
    """
    profile, created = DriverProfile.objects.update_or_create(user=user, defaults=data)
    logger.info(
        "Driver profile %s for user %s (%s)",
        "created" if created else "updated", user.id, profile.vehicle_type
    )
    return profile, created


def set_availability(profile: DriverProfile, is_available: bool) -> DriverProfile:
    """
    Toggle whether the driver is taking rides.
    The change is echoed to the driver's realtime sessions.
    """
    profile.is_available = is_available
    profile.save(update_fields=["is_available", "updated_at"])

    transaction.on_commit(lambda: notify_driver_availability(profile))
    return profile
