import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from services import ride_management
from .models import Location, RideNotification
from .serializers import (
    RideSerializer,
    RideCreateSerializer,
    RideAcceptSerializer,
    RideCancelSerializer,
    RideCompleteSerializer,
    RideNotificationSerializer,
    LocationSerializer,
)

logger = logging.getLogger(__name__)


# ==================== Customer Ride APIs ====================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def rides(request):
    """
    GET: the caller's ride history, newest first.
    POST: request a new ride.

    POST Body:
    {
        "from_location": "City Center",
        "to_location": "Airport",
        "pickup_time": "2025-09-05T10:30:00Z",
        "vehicle_type": "car",   // auto | car | bike
        "notes": "Two bags"      // optional
    }
    """
    if request.method == 'GET':
        history = ride_management.list_customer_rides(request.user)
        serializer = RideSerializer(history, many=True)
        return Response({'count': len(serializer.data), 'rides': serializer.data})

    serializer = RideCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = ride_management.create_ride(request.user, **serializer.validated_data)

    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ride_detail(request, ride_id):
    """A single ride visible to the caller."""
    ride = ride_management.get_ride_for_user(request.user, ride_id)
    return Response(RideSerializer(ride).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cancel_ride(request, ride_id):
    """Cancel by the customer or the assigned driver."""
    serializer = RideCancelSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = ride_management.cancel_ride(
        request.user,
        ride_id,
        reason=serializer.validated_data.get('reason', ''),
    )
    return Response({
        'success': True,
        'message': result.message,
        'was_assigned': result.extra['was_assigned'],
        'ride': RideSerializer(result.ride).data,
    })


# ==================== Driver Ride Actions ====================

@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_ride(request, ride_id=None):
    """
    Accept a pending ride. The ride id comes from the URL or the body:
    {"ride_id": "<uuid>"}
    """
    if ride_id is None:
        serializer = RideAcceptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ride_id = serializer.validated_data['ride_id']

    result = ride_management.accept_ride(request.user, ride_id)

    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def start_ride(request, ride_id):
    """Assigned driver picks the customer up: accepted -> in_progress."""
    result = ride_management.start_ride(request.user, ride_id)
    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def complete_ride(request, ride_id):
    """
    Assigned driver finishes the ride: in_progress -> completed.

    POST Body:
    {
        "distance_km": 12.5,
        "final_fare": 150
    }
    """
    serializer = RideCompleteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = ride_management.complete_ride(
        request.user,
        ride_id,
        distance_km=serializer.validated_data['distance_km'],
        final_fare=serializer.validated_data['final_fare'],
    )
    return Response({
        'success': True,
        'message': result.message,
        'ride': RideSerializer(result.ride).data,
    })


# ==================== Locations ====================

@api_view(['GET'])
@permission_classes([AllowAny])
def list_locations(request):
    """Predefined pickup / drop-off points, readable by anyone."""
    serializer = LocationSerializer(Location.objects.all(), many=True)
    return Response(serializer.data)


# ==================== Notifications ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    """The caller's notifications, newest first. ``?unread=true`` filters unread."""
    notifications = RideNotification.objects.filter(user=request.user)
    if request.query_params.get('unread', '').lower() in ('1', 'true', 'yes'):
        notifications = notifications.filter(is_read=False)

    serializer = RideNotificationSerializer(notifications, many=True)
    return Response({
        'count': len(serializer.data),
        'unread': RideNotification.objects.filter(user=request.user, is_read=False).count(),
        'notifications': serializer.data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_notification_read(request, notification_id):
    updated = RideNotification.objects.filter(
        id=notification_id, user=request.user
    ).update(is_read=True)

    if not updated:
        return Response(
            {'error': 'Notification not found'},
            status=status.HTTP_404_NOT_FOUND
        )
    return Response({'success': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_all_notifications_read(request):
    updated = RideNotification.objects.filter(
        user=request.user, is_read=False
    ).update(is_read=True)
    logger.debug("Marked %s notifications read for user %s", updated, request.user.id)
    return Response({'success': True, 'updated': updated})
