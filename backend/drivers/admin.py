from django.contrib import admin
from drivers.models import DriverProfile


@admin.register(DriverProfile)
class DriverProfileAdmin(admin.ModelAdmin):
    """Admin panel for managing Driver Profiles"""

    list_display = [
        "user",
        "vehicle_type",
        "vehicle_number",
        "license_number",
        "is_available",
        "updated_at",
    ]

    list_filter = [
        "vehicle_type",
        "is_available",
    ]

    search_fields = [
        "user__username",
        "vehicle_number",
        "license_number",
    ]

    readonly_fields = [
        "created_at",
        "updated_at",
    ]

    ordering = ("user__username",)
