from django.urls import path
from . import views

app_name = 'rides'

urlpatterns = [
    # Customer APIs
    path('', views.rides, name='rides'),
    path('<uuid:ride_id>/', views.ride_detail, name='ride-detail'),
    path('<uuid:ride_id>/cancel/', views.cancel_ride, name='cancel-ride'),

    # Driver Ride Actions
    path('accept/', views.accept_ride, name='accept-ride-body'),
    path('<uuid:ride_id>/accept/', views.accept_ride, name='accept-ride'),
    path('<uuid:ride_id>/start/', views.start_ride, name='start-ride'),
    path('<uuid:ride_id>/complete/', views.complete_ride, name='complete-ride'),

    # Lookups
    path('locations/', views.list_locations, name='locations'),
    path('notifications/', views.list_notifications, name='notifications'),
    path('notifications/read-all/', views.mark_all_notifications_read, name='notifications-read-all'),
    path('notifications/<uuid:notification_id>/read/', views.mark_notification_read, name='notification-read'),
]
