"""Tells what to show in the Django admin interface for rides app"""

from django.contrib import admin
from .models import Location, Ride, RideNotification


@admin.register(Ride)
class RideAdmin(admin.ModelAdmin):
    """Ride admin"""
    list_display = ['id', 'customer', 'driver', 'vehicle_type', 'status',
                    'estimated_fare', 'final_fare', 'pickup_time', 'created_at']
    list_filter = ['status', 'vehicle_type', 'created_at']
    search_fields = ['customer__username', 'driver__username', 'from_location', 'to_location']
    readonly_fields = ['created_at', 'updated_at', 'estimated_fare']
    date_hierarchy = 'created_at'


@admin.register(RideNotification)
class RideNotificationAdmin(admin.ModelAdmin):
    list_display = ("ride", "user", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("ride__id", "user__username", "message")


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "address", "latitude", "longitude")
    search_fields = ("name", "address")
