"""Realtime consumers for WebSocket communication."""

from .base import BaseConsumer
from .ride_feed import RideFeedConsumer

__all__ = [
    "BaseConsumer",
    "RideFeedConsumer",
]
