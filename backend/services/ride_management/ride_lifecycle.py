"""
Core ride lifecycle operations.

Status moves one way: pending -> accepted -> in_progress -> completed, with
cancelled reachable from any non-terminal state. Every transition is a
single conditional UPDATE checked by row count, so concurrent callers can
never both move the same ride out of the same state.

Side effects (emails, realtime events) run after the transaction commits.
"""

import logging
import random
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Dict, Any, Iterable
from dataclasses import dataclass

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.models import Profile
from drivers.models import DriverProfile
from rides.models import Ride, RideNotification
from services.mailer import notify_by_email
from realtime import notifications as realtime
from .fares import estimate_fare
from .exceptions import (
    ProfileNotFoundError,
    DriverProfileNotFoundError,
    RideNotFoundError,
    RideUnavailableError,
    RideValidationError,
)

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = ("from_location", "to_location", "pickup_time", "vehicle_type")


@dataclass
class RideResult:
    """Result object for ride operations."""
    success: bool
    ride: Optional[Ride] = None
    message: str = ""
    error_code: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


# ===================== Lookups =====================

def _require_profile(user, message: str) -> Profile:
    profile = Profile.objects.filter(user=user).first()
    if profile is None:
        raise ProfileNotFoundError(message)
    return profile


def _require_driver_profile(user) -> DriverProfile:
    driver_profile = DriverProfile.objects.filter(user=user).first()
    if driver_profile is None:
        raise DriverProfileNotFoundError("Driver vehicle profile not found")
    return driver_profile


def _coerce_ride_id(ride_id) -> uuid.UUID:
    if isinstance(ride_id, uuid.UUID):
        return ride_id
    try:
        return uuid.UUID(str(ride_id))
    except (TypeError, ValueError):
        raise RideValidationError("Invalid ride id", errors={"ride_id": ["Must be a valid UUID."]})


def _display_name(profile: Optional[Profile], fallback: str) -> str:
    return (profile.full_name if profile else "") or fallback


def _create_notifications(ride: Ride, messages: Iterable[tuple]) -> list:
    """Insert one RideNotification per (user_id, message) pair."""
    return [
        RideNotification.objects.create(ride=ride, user_id=user_id, message=message)
        for user_id, message in messages
        if user_id
    ]


def _publish_after_commit(ride: Ride, event_type: str, user_ids, notifications, message=""):
    """Queue realtime publication of a ride change and its notifications."""
    def publish():
        realtime.notify_ride_event(event_type, ride, user_ids, message)
        for notification in notifications:
            realtime.notify_notification_created(notification)

    transaction.on_commit(publish)


# ===================== Customer Operations =====================

def create_ride(
    customer,
    from_location: str,
    to_location: str,
    pickup_time,
    vehicle_type: str,
    notes: Optional[str] = None,
    from_latitude=None,
    from_longitude=None,
    to_latitude=None,
    to_longitude=None,
    rng=random,
) -> RideResult:
    """
    Create a pending ride for the customer.

    Args:
        customer: authenticated User creating the request
        from_location / to_location: human-readable places
        pickup_time: aware datetime of the pickup
        vehicle_type: one of bike, auto, car
        notes: optional free text for the driver
        rng: random source for the fare estimate

    Returns:
        RideResult with the created ride

    Raises:
        ProfileNotFoundError: caller has no Profile
        RideValidationError: a booking field is missing or vehicle_type is unknown
    """
    profile = _require_profile(customer, "Customer profile not found")

    values = {
        "from_location": from_location,
        "to_location": to_location,
        "pickup_time": pickup_time,
        "vehicle_type": vehicle_type,
    }
    missing = {
        field: ["This field is required."]
        for field in REQUIRED_BOOKING_FIELDS
        if values[field] in (None, "")
    }
    if missing:
        raise RideValidationError("Missing required ride details", errors=missing)

    estimated_fare = estimate_fare(vehicle_type, rng=rng)

    with transaction.atomic():
        ride = Ride.objects.create(
            customer=customer,
            from_location=from_location,
            to_location=to_location,
            from_latitude=from_latitude,
            from_longitude=from_longitude,
            to_latitude=to_latitude,
            to_longitude=to_longitude,
            pickup_time=pickup_time,
            vehicle_type=vehicle_type,
            notes=notes or None,
            estimated_fare=estimated_fare,
            status=Ride.STATUS_PENDING,
        )

        notifications = _create_notifications(ride, [
            (customer.id, f"Your ride request from {from_location} to {to_location} has been submitted."),
        ])

        transaction.on_commit(lambda: notify_by_email("ride_created", ride, customer))
        transaction.on_commit(lambda: realtime.notify_vehicle_feed("ride_created", ride))
        _publish_after_commit(ride, "ride_created", [customer.id], notifications)

    logger.info(
        "Ride %s created by user %s (%s, fare %s)",
        ride.id, customer.id, vehicle_type, estimated_fare
    )

    return RideResult(
        success=True,
        ride=ride,
        message="Ride requested successfully",
        extra={"customer_name": _display_name(profile, "Customer")},
    )


def list_customer_rides(customer):
    """All rides the customer requested, newest first."""
    return (
        Ride.objects.filter(customer=customer)
        .select_related("customer__profile", "driver__profile", "driver__driver_profile")
        .order_by("-created_at")
    )


# ===================== Driver Operations =====================

def accept_ride(driver, ride_id) -> RideResult:
    """
    Claim a pending ride for the driver.

    The claim is one conditional UPDATE on ``status='pending' AND driver IS
    NULL``; if another driver got there first no row matches and the caller
    gets RideUnavailableError. Vehicle type is not checked here.

    Raises:
        ProfileNotFoundError / DriverProfileNotFoundError: onboarding incomplete
        RideUnavailableError: ride missing, already accepted or cancelled
    """
    driver_profile_row = _require_profile(driver, "Driver profile not found")
    vehicle = _require_driver_profile(driver)
    ride_uuid = _coerce_ride_id(ride_id)

    with transaction.atomic():
        claimed = Ride.objects.filter(
            id=ride_uuid,
            status=Ride.STATUS_PENDING,
            driver__isnull=True,
        ).update(
            driver=driver,
            status=Ride.STATUS_ACCEPTED,
            updated_at=timezone.now(),
        )

        if claimed == 0:
            logger.info("Driver %s lost or missed ride %s", driver.id, ride_uuid)
            raise RideUnavailableError("Ride not found or already accepted")

        ride = Ride.objects.select_related("customer").get(id=ride_uuid)
        customer = ride.customer

        driver_name = _display_name(driver_profile_row, "a driver")
        notifications = _create_notifications(ride, [
            (ride.customer_id,
             f"Your ride has been accepted by {driver_name}. They will contact you shortly."),
            (driver.id,
             f"You have successfully accepted a ride from {ride.from_location} to {ride.to_location}."),
        ])

        transaction.on_commit(lambda: notify_by_email("ride_accepted_customer", ride, customer))
        transaction.on_commit(lambda: notify_by_email("ride_accepted_driver", ride, driver))
        transaction.on_commit(lambda: realtime.notify_vehicle_feed("ride_taken", ride))
        _publish_after_commit(ride, "ride_updated", [ride.customer_id, driver.id], notifications)

    logger.info("Ride %s accepted by driver %s (%s)", ride.id, driver.id, vehicle.vehicle_type)

    return RideResult(
        success=True,
        ride=ride,
        message="Ride accepted successfully",
        extra={"notifications": len(notifications)},
    )


def _assigned_ride_or_error(driver, ride_uuid, expected_status, action: str) -> Ride:
    """Explain why a conditional update on a driver's ride matched nothing."""
    ride = Ride.objects.filter(id=ride_uuid, driver=driver).first()
    if ride is None:
        raise RideNotFoundError("Ride not found or not assigned to you")
    raise RideUnavailableError(
        f"Cannot {action} a ride that is {ride.status} (expected {expected_status})"
    )


def start_ride(driver, ride_id) -> RideResult:
    """accepted -> in_progress, by the assigned driver only."""
    ride_uuid = _coerce_ride_id(ride_id)

    with transaction.atomic():
        updated = Ride.objects.filter(
            id=ride_uuid,
            driver=driver,
            status=Ride.STATUS_ACCEPTED,
        ).update(status=Ride.STATUS_IN_PROGRESS, updated_at=timezone.now())

        if updated == 0:
            _assigned_ride_or_error(driver, ride_uuid, Ride.STATUS_ACCEPTED, "start")

        ride = Ride.objects.get(id=ride_uuid)
        notifications = _create_notifications(ride, [
            (ride.customer_id, "Your driver has started the ride."),
        ])
        _publish_after_commit(ride, "ride_updated", [ride.customer_id, driver.id], notifications)

    logger.info("Ride %s started by driver %s", ride.id, driver.id)
    return RideResult(success=True, ride=ride, message="Ride started")


def _parse_amount(value, field: str, errors: Dict[str, list]) -> Optional[Decimal]:
    """Validate a completion amount against the Ride column it is written to."""
    if value is None or value == "":
        errors[field] = ["This field is required."]
        return None
    if isinstance(value, bool):
        errors[field] = ["A valid number is required."]
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors[field] = ["A valid number is required."]
        return None
    if not amount.is_finite():
        errors[field] = ["A valid number is required."]
        return None
    if amount < 0:
        errors[field] = ["Must not be negative."]
        return None

    column = Ride._meta.get_field(field)
    limit = Decimal(10) ** (column.max_digits - column.decimal_places)
    if amount >= limit:
        errors[field] = [f"Must be less than {limit}."]
        return None

    amount = amount.quantize(Decimal(1).scaleb(-column.decimal_places), rounding=ROUND_HALF_UP)
    if amount >= limit:
        errors[field] = [f"Must be less than {limit}."]
        return None
    return amount


def complete_ride(driver, ride_id, distance_km, final_fare) -> RideResult:
    """
    in_progress -> completed, writing distance and final fare in the same UPDATE.

    Raises:
        RideValidationError: distance_km or final_fare missing / not numeric;
            the ride is left untouched
        RideNotFoundError: not the assigned driver
        RideUnavailableError: ride is not in progress
    """
    ride_uuid = _coerce_ride_id(ride_id)

    errors: Dict[str, list] = {}
    distance = _parse_amount(distance_km, "distance_km", errors)
    fare = _parse_amount(final_fare, "final_fare", errors)
    if errors:
        raise RideValidationError(
            "Please enter distance and fare before completing the ride",
            errors=errors,
        )

    with transaction.atomic():
        updated = Ride.objects.filter(
            id=ride_uuid,
            driver=driver,
            status=Ride.STATUS_IN_PROGRESS,
        ).update(
            status=Ride.STATUS_COMPLETED,
            distance_km=distance,
            final_fare=fare,
            updated_at=timezone.now(),
        )

        if updated == 0:
            _assigned_ride_or_error(driver, ride_uuid, Ride.STATUS_IN_PROGRESS, "complete")

        ride = Ride.objects.get(id=ride_uuid)
        notifications = _create_notifications(ride, [
            (ride.customer_id,
             f"Your ride to {ride.to_location} is complete. Final fare: {ride.final_fare}."),
        ])
        _publish_after_commit(ride, "ride_updated", [ride.customer_id, driver.id], notifications)

    logger.info("Ride %s completed by driver %s (%s km, fare %s)", ride.id, driver.id, distance, fare)
    return RideResult(success=True, ride=ride, message="Ride completed successfully")


def list_available_rides(driver):
    """
    Pending rides matching the driver's vehicle type, earliest pickup first.

    Raises:
        DriverProfileNotFoundError: driver has not set up a vehicle
    """
    vehicle = _require_driver_profile(driver)
    return (
        Ride.objects.filter(
            status=Ride.STATUS_PENDING,
            driver__isnull=True,
            vehicle_type=vehicle.vehicle_type,
        )
        .select_related("customer__profile")
        .order_by("pickup_time")
    )


def list_driver_rides(driver, active_only: bool = True):
    """Rides assigned to the driver; only non-terminal ones unless active_only is False."""
    rides = Ride.objects.filter(driver=driver).select_related("customer__profile")
    if active_only:
        rides = rides.exclude(status__in=Ride.TERMINAL_STATUSES)
    return rides.order_by("-created_at")


# ===================== Shared Operations =====================

def get_ride_for_user(user, ride_id) -> Ride:
    """
    Return a ride the user may see: their own, one assigned to them, or a
    pending ride of their vehicle type.
    """
    ride_uuid = _coerce_ride_id(ride_id)
    visible = Q(customer=user) | Q(driver=user)

    vehicle = DriverProfile.objects.filter(user=user).first()
    if vehicle is not None:
        visible |= Q(status=Ride.STATUS_PENDING, driver__isnull=True, vehicle_type=vehicle.vehicle_type)

    ride = (
        Ride.objects.filter(visible, id=ride_uuid)
        .select_related("customer__profile", "driver__profile", "driver__driver_profile")
        .first()
    )
    if ride is None:
        raise RideNotFoundError("Ride not found")
    return ride


def cancel_ride(user, ride_id, reason: str = "") -> RideResult:
    """
    Cancel a non-terminal ride. Allowed for the customer or the assigned driver.

    The driver assignment is kept on the cancelled row.
    """
    ride_uuid = _coerce_ride_id(ride_id)

    with transaction.atomic():
        updated = Ride.objects.filter(
            Q(customer=user) | Q(driver=user),
            id=ride_uuid,
            status__in=Ride.ACTIVE_STATUSES,
        ).update(status=Ride.STATUS_CANCELLED, updated_at=timezone.now())

        if updated == 0:
            ride = Ride.objects.filter(Q(customer=user) | Q(driver=user), id=ride_uuid).first()
            if ride is None:
                raise RideNotFoundError("Ride not found")
            raise RideUnavailableError(f"Cannot cancel - ride is already {ride.status}")

        ride = Ride.objects.get(id=ride_uuid)
        by_customer = ride.customer_id == user.id
        other_party = ride.driver_id if by_customer else ride.customer_id
        who = "customer" if by_customer else "driver"

        message = f"Ride from {ride.from_location} to {ride.to_location} was cancelled by the {who}."
        if reason:
            message = f"{message} Reason: {reason}"

        notifications = _create_notifications(ride, [(other_party, message)])
        _publish_after_commit(ride, "ride_updated", [ride.customer_id, ride.driver_id], notifications)

    logger.info("Ride %s cancelled by %s %s", ride.id, who, user.id)
    return RideResult(
        success=True,
        ride=ride,
        message="Ride cancelled successfully",
        extra={"was_assigned": ride.driver_id is not None},
    )
