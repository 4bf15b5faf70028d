"""Rendering and sending of ride notification emails."""

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    """Outcome of a best-effort email."""
    sent: bool = False
    queued: bool = False
    skipped: bool = False
    error: Optional[str] = None


# kind -> (subject, template)
EMAIL_KINDS = {
    "ride_created": (
        "Ride Request Confirmed - LocalRide",
        "rides/emails/ride_created.html",
    ),
    "ride_accepted_customer": (
        "Ride Accepted - LocalRide",
        "rides/emails/ride_accepted_customer.html",
    ),
    "ride_accepted_driver": (
        "Ride Assignment Confirmed - LocalRide",
        "rides/emails/ride_accepted_driver.html",
    ),
}


def _profile_of(user):
    from accounts.models import Profile
    return Profile.objects.filter(user=user).first() if user else None


def _build_context(ride, recipient):
    from drivers.models import DriverProfile

    customer_profile = _profile_of(ride.customer)
    driver_profile = _profile_of(ride.driver)
    vehicle = DriverProfile.objects.filter(user=ride.driver).first() if ride.driver_id else None

    return {
        "ride": ride,
        "recipient": recipient,
        "vehicle_type": ride.vehicle_type.upper(),
        "customer_name": getattr(customer_profile, "full_name", "") or "Customer",
        "customer_phone": getattr(customer_profile, "phone", "") or "Not provided",
        "driver_name": getattr(driver_profile, "full_name", "") or "Driver",
        "driver_phone": getattr(driver_profile, "phone", "") or "Not provided",
        "driver_vehicle": (
            f"{vehicle.vehicle_type.upper()} - {vehicle.vehicle_number}" if vehicle else ""
        ),
    }


def deliver_ride_email(kind: str, ride, recipient) -> EmailResult:
    """Render and send one ride email right now, swallowing delivery errors."""
    if kind not in EMAIL_KINDS:
        raise ValueError(f"Unknown ride email kind: {kind}")

    if not recipient or not recipient.email:
        logger.info("Skipping %s email for ride %s: recipient has no email", kind, ride.id)
        return EmailResult(skipped=True)

    subject, template = EMAIL_KINDS[kind]
    try:
        html = render_to_string(template, _build_context(ride, recipient))
        send_mail(
            subject=subject,
            message=strip_tags(html),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient.email],
            html_message=html,
        )
    except Exception as e:
        logger.exception("Failed to send %s email for ride %s", kind, ride.id)
        return EmailResult(error=str(e))

    logger.info("Sent %s email for ride %s to user %s", kind, ride.id, recipient.id)
    return EmailResult(sent=True)


def notify_by_email(kind: str, ride, recipient) -> EmailResult:
    """
    Send (or queue) a ride email according to the RIDE_EMAILS_* settings.

    With RIDE_EMAILS_ASYNC the email goes through the Celery task in
    rides.tasks; a broker failure is logged and reported, never raised.
    """
    if not getattr(settings, "RIDE_EMAILS_ENABLED", True):
        return EmailResult(skipped=True)

    if getattr(settings, "RIDE_EMAILS_ASYNC", False):
        from rides.tasks import send_ride_email_task
        try:
            send_ride_email_task.delay(kind, str(ride.id), recipient.id)
        except Exception as e:
            logger.exception("Failed to queue %s email for ride %s", kind, ride.id)
            return EmailResult(error=str(e))
        return EmailResult(queued=True)

    return deliver_ride_email(kind, ride, recipient)
