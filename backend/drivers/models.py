from django.db import models
from django.conf import settings

User = settings.AUTH_USER_MODEL

VEHICLE_TYPE_CHOICES = [
    ('auto', 'Auto'),
    ('car', 'Car'),
    ('bike', 'Bike'),
]


class DriverProfile(models.Model):
    """Driver vehicle details and availability"""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='driver_profile')

    # Vehicle details
    vehicle_type = models.CharField(max_length=10, choices=VEHICLE_TYPE_CHOICES)
    vehicle_number = models.CharField(max_length=20)
    license_number = models.CharField(max_length=50, null=True, blank=True)

    # Availability & location
    is_available = models.BooleanField(default=True)
    current_latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    current_longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'driver_profiles'

    def __str__(self):
        return f"{self.user} - {self.get_vehicle_type_display()} {self.vehicle_number}"
