"""
Realtime app: WebSocket change feed for rides, notifications and driver availability.

Key Components:
    - consumers/: WebSocket consumers
    - notifications.py: publish helpers used by the service layer
    - middleware.py: JWT / cookie authentication for WebSocket connections

Usage:
    from realtime.consumers import RideFeedConsumer
    from realtime.notifications import notify_ride_event, notify_vehicle_feed
"""
