"""
Best-effort ride emails.

Sending never raises: every call returns an ``EmailResult`` which callers
are free to ignore.
"""

from .emails import (
    EmailResult,
    EMAIL_KINDS,
    deliver_ride_email,
    notify_by_email,
)

__all__ = [
    "EmailResult",
    "EMAIL_KINDS",
    "deliver_ride_email",
    "notify_by_email",
]
