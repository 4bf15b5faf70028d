import uuid

from django.db import models
from django.conf import settings

from drivers.models import VEHICLE_TYPE_CHOICES


class Location(models.Model):
    """Predefined pickup / drop-off point shown to customers"""

    name = models.CharField(max_length=100)
    address = models.TextField()
    latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'locations'
        ordering = ['name']

    def __str__(self):
        return self.name


class Ride(models.Model):
    """A single ride request, tracked from pending to completed/cancelled"""

    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_IN_PROGRESS)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='rides_requested'
    )

    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rides_driven'
    )

    # Route
    from_location = models.TextField()
    to_location = models.TextField()
    from_latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    from_longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)
    to_latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    to_longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)

    pickup_time = models.DateTimeField()
    vehicle_type = models.CharField(max_length=10, choices=VEHICLE_TYPE_CHOICES)

    # Fare; final values are entered by the driver on completion
    distance_km = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    estimated_fare = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    final_fare = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rides'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'vehicle_type'], name='rides_status_vehicle_idx'),
        ]

    def __str__(self):
        return f"Ride {self.id} - {self.customer} - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES


class RideNotification(models.Model):
    """In-app message addressed to one user about one ride"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ride = models.ForeignKey(Ride, on_delete=models.CASCADE, related_name='notifications')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ride_notifications'
    )
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'ride_notifications'
        ordering = ['-created_at']

    def __str__(self):
        return f"Notification for {self.user} on ride {self.ride_id}"
