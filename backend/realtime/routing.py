"""WebSocket URL routing for the realtime app."""

from django.urls import re_path

from .consumers.ride_feed import RideFeedConsumer

websocket_urlpatterns = [
    # Ride change feed for customers and drivers
    # URL: ws://localhost:8000/ws/rides/?token=<access>
    re_path(
        r"ws/rides/$",
        RideFeedConsumer.as_asgi(),
        name="ride-feed-ws"
    ),
]
