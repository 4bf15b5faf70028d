from django.urls import path
from .views import (
    DriverProfileView,
    DriverAvailabilityView,
    AvailableRidesView,
    DriverRidesView,
)

urlpatterns = [
    path("profile/", DriverProfileView.as_view(), name="driver-profile"),
    path("availability/", DriverAvailabilityView.as_view(), name="driver-availability"),
    path("available-rides/", AvailableRidesView.as_view(), name="driver-available-rides"),
    path("rides/", DriverRidesView.as_view(), name="driver-rides"),
]
