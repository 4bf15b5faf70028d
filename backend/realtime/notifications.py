"""
Publish helpers for the realtime change feed.

Every helper is best-effort: a missing or failing channel layer is logged
and reported as ``False``, never raised into the caller's transaction.

Groups:
    - user_<user_id>: personal group, joined on connect
    - rides_<vehicle_type>: pending-ride feed for drivers of that vehicle type
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def user_group(user_id) -> str:
    return f"user_{user_id}"


def vehicle_group(vehicle_type: str) -> str:
    return f"rides_{vehicle_type}"


def _group_send(group: str, payload: Dict[str, Any]) -> bool:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    try:
        async_to_sync(channel_layer.group_send)(group, payload)
    except Exception:
        logger.exception("Failed to publish %s to %s", payload.get("type"), group)
        return False
    logger.debug("WS -> %s: %s", group, payload.get("type"))
    return True


def _ride_data(ride) -> Dict[str, Any]:
    from rides.serializers import RideSerializer
    return dict(RideSerializer(ride).data)


# ---------------------- Ride Events ----------------------

def notify_ride_event(
    event_type: str,
    ride,
    user_ids: Iterable[int | None],
    message: str = "",
) -> int:
    """
    Send a ride event (ride_created / ride_updated) to each listed user.

    Returns the number of groups the event reached.
    """
    payload = {
        "type": event_type,
        "ride_id": str(ride.id),
        "status": ride.status,
        "ride_data": _ride_data(ride),
    }
    if message:
        payload["message"] = message

    sent = 0
    for user_id in {uid for uid in user_ids if uid}:
        sent += _group_send(user_group(user_id), payload)
    return sent


def notify_vehicle_feed(event_type: str, ride) -> bool:
    """Tell drivers watching this vehicle type that a pending ride appeared or was taken."""
    payload = {
        "type": event_type,
        "ride_id": str(ride.id),
        "vehicle_type": ride.vehicle_type,
    }
    if event_type == "ride_created":
        payload["ride_data"] = _ride_data(ride)
    return _group_send(vehicle_group(ride.vehicle_type), payload)


# ---------------------- Notification / Driver Events ----------------------

def notify_notification_created(notification) -> bool:
    """Push a freshly created RideNotification to its addressee."""
    return _group_send(user_group(notification.user_id), {
        "type": "notification_created",
        "notification_id": str(notification.id),
        "ride_id": str(notification.ride_id),
        "message": notification.message,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    })


def notify_driver_availability(profile) -> bool:
    """Echo a driver's availability change to the driver's own sessions."""
    return _group_send(user_group(profile.user_id), {
        "type": "driver_availability_changed",
        "driver_id": profile.user_id,
        "is_available": profile.is_available,
        "vehicle_type": profile.vehicle_type,
    })
