from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check),  # Health check endpoint

    # Authentication endpoints (register, login, refresh, profile)
    path('api/auth/', include('accounts.urls')),

    # Driver APIs (vehicle profile, availability, available rides, assigned rides)
    path('api/driver/', include('drivers.urls')),

    # Ride endpoints (create, accept, status transitions, notifications, locations)
    path('api/rides/', include('rides.urls')),
]
