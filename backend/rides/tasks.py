"""Celery tasks for ride-related background processing."""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def send_ride_email_task(kind: str, ride_id: str, recipient_id: int):
    """
    Deliver one ride notification email off the request path.

    Queued by services.mailer.notify_by_email when RIDE_EMAILS_ASYNC is on.
    Delivery errors are already swallowed by deliver_ride_email.
    """
    from django.contrib.auth import get_user_model
    from rides.models import Ride
    from services.mailer import deliver_ride_email

    User = get_user_model()

    try:
        ride = Ride.objects.select_related("customer", "driver").get(id=ride_id)
        recipient = User.objects.get(id=recipient_id)
    except (Ride.DoesNotExist, User.DoesNotExist):
        logger.warning(f"Ride {ride_id} or user {recipient_id} not found for {kind} email")
        return False

    result = deliver_ride_email(kind, ride, recipient)
    return result.sent
