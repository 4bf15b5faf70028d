"""Ride change feed consumer shared by customers and drivers."""

import logging
from typing import Dict, Any, Optional

from channels.db import database_sync_to_async

from drivers.models import DriverProfile, VEHICLE_TYPE_CHOICES
from realtime.notifications import vehicle_group
from .base import BaseConsumer

logger = logging.getLogger(__name__)

VEHICLE_TYPES = {value for value, _ in VEHICLE_TYPE_CHOICES}


@database_sync_to_async
def get_driver_vehicle_type(user_id) -> Optional[str]:
    """Vehicle type of the user's DriverProfile, or None for non-drivers."""
    return (
        DriverProfile.objects.filter(user_id=user_id)
        .values_list("vehicle_type", flat=True)
        .first()
    )


class RideFeedConsumer(BaseConsumer):
    """
    WebSocket consumer for ride changes.

    Every user receives events about their own rides and notifications on
    their personal group. Drivers additionally send ``watch_rides`` to
    receive newly requested / taken rides of their own vehicle type; the
    vehicle type comes from the DriverProfile, a different one is refused.

    Client -> server:
        {"type": "watch_rides"}  // optional "vehicle_type", must match the profile
        {"type": "unwatch_rides"}
        {"type": "ping"}
    """

    message_handlers = {
        "watch_rides": "watch_rides",
        "unwatch_rides": "unwatch_rides",
        "ping": "ping",
    }

    async def on_connect(self):
        self.watched_group = None
        await self.reply(
            "connection_established",
            user_id=self.user_id,
            message="Ride feed connected",
        )

    # ---------------------- Client Messages ----------------------

    async def watch_rides(self, data: Dict[str, Any]):
        requested = data.get("vehicle_type")
        if requested is not None and requested not in VEHICLE_TYPES:
            await self.send_error("vehicle_type must be one of auto, car or bike")
            return

        vehicle_type = await get_driver_vehicle_type(self.user_id)
        if vehicle_type is None:
            await self.send_error("Driver vehicle profile not found")
            return
        if requested is not None and requested != vehicle_type:
            logger.info("User %s refused %s feed (drives %s)", self.user_id, requested, vehicle_type)
            await self.send_error(f"You can only watch {vehicle_type} rides")
            return

        if self.watched_group:
            await self.leave(self.watched_group)

        self.watched_group = vehicle_group(vehicle_type)
        await self.join(self.watched_group)
        logger.debug("User %s watching %s", self.user_id, self.watched_group)
        await self.reply("watching_rides", vehicle_type=vehicle_type)

    async def unwatch_rides(self, data: Dict[str, Any]):
        if self.watched_group:
            await self.leave(self.watched_group)
            self.watched_group = None
        await self.reply("stopped_watching_rides")

    async def ping(self, data: Dict[str, Any]):
        await self.reply("pong")

    # ---------------------- Event Handlers (from group_send) ----------------------

    async def ride_created(self, event):
        await self.reply("ride_created", ride_id=event.get("ride_id"), ride=event.get("ride_data"))

    async def ride_updated(self, event):
        await self.reply(
            "ride_updated",
            ride_id=event.get("ride_id"),
            status=event.get("status"),
            ride=event.get("ride_data"),
            message=event.get("message", ""),
        )

    async def ride_taken(self, event):
        """A pending ride of the watched vehicle type was accepted."""
        await self.reply("ride_taken", ride_id=event.get("ride_id"))

    async def notification_created(self, event):
        await self.reply(
            "notification_created",
            notification_id=event.get("notification_id"),
            ride_id=event.get("ride_id"),
            message=event.get("message"),
            created_at=event.get("created_at"),
        )

    async def driver_availability_changed(self, event):
        await self.reply(
            "driver_availability_changed",
            is_available=event.get("is_available"),
            vehicle_type=event.get("vehicle_type"),
        )
