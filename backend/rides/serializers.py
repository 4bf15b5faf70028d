from rest_framework import serializers

from accounts.models import Profile
from drivers.models import DriverProfile, VEHICLE_TYPE_CHOICES
from .models import Location, Ride, RideNotification


def _profile_of(user):
    if user is None:
        return None
    try:
        return user.profile
    except Profile.DoesNotExist:
        return None


class RideSerializer(serializers.ModelSerializer):
    """Ride as seen by its customer or driver"""
    customer = serializers.SerializerMethodField()
    driver = serializers.SerializerMethodField()

    class Meta:
        model = Ride
        fields = ['id', 'customer', 'driver', 'from_location', 'to_location',
                  'from_latitude', 'from_longitude', 'to_latitude', 'to_longitude',
                  'pickup_time', 'vehicle_type', 'distance_km', 'estimated_fare',
                  'final_fare', 'status', 'notes', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_customer(self, obj):
        profile = _profile_of(obj.customer)
        return {
            'id': obj.customer_id,
            'full_name': getattr(profile, 'full_name', ''),
            'phone': getattr(profile, 'phone', ''),
        }

    def get_driver(self, obj):
        if obj.driver_id is None:
            return None
        profile = _profile_of(obj.driver)
        try:
            vehicle = obj.driver.driver_profile
        except DriverProfile.DoesNotExist:
            vehicle = None
        return {
            'id': obj.driver_id,
            'full_name': getattr(profile, 'full_name', ''),
            'phone': getattr(profile, 'phone', ''),
            'vehicle_type': getattr(vehicle, 'vehicle_type', None),
            'vehicle_number': getattr(vehicle, 'vehicle_number', None),
        }


class RideCreateSerializer(serializers.Serializer):
    """Validates a customer's booking request"""
    from_location = serializers.CharField(max_length=255)
    to_location = serializers.CharField(max_length=255)
    pickup_time = serializers.DateTimeField()
    vehicle_type = serializers.ChoiceField(choices=VEHICLE_TYPE_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    from_latitude = serializers.DecimalField(max_digits=10, decimal_places=8, required=False, allow_null=True,
                                             min_value=-90, max_value=90)
    from_longitude = serializers.DecimalField(max_digits=11, decimal_places=8, required=False, allow_null=True,
                                              min_value=-180, max_value=180)
    to_latitude = serializers.DecimalField(max_digits=10, decimal_places=8, required=False, allow_null=True,
                                           min_value=-90, max_value=90)
    to_longitude = serializers.DecimalField(max_digits=11, decimal_places=8, required=False, allow_null=True,
                                            min_value=-180, max_value=180)


class RideAcceptSerializer(serializers.Serializer):
    ride_id = serializers.UUIDField()


class RideCompleteSerializer(serializers.Serializer):
    """Distance and fare entered by the driver at drop-off"""
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0)
    final_fare = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class RideCancelSerializer(serializers.Serializer):
    """Serializer for ride cancellation"""
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class RideNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = RideNotification
        fields = ['id', 'ride', 'message', 'is_read', 'created_at']
        read_only_fields = fields


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ['id', 'name', 'address', 'latitude', 'longitude']
