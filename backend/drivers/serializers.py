from rest_framework import serializers
from drivers.models import DriverProfile


class DriverProfileSerializer(serializers.ModelSerializer):
    """
    Full driver profile; also used to create or update it.
    """

    class Meta:
        model = DriverProfile
        fields = [
            "id",
            "user_id",
            "vehicle_type",
            "vehicle_number",
            "license_number",
            "is_available",
            "current_latitude",
            "current_longitude",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "user_id", "created_at", "updated_at"]
        extra_kwargs = {
            "license_number": {"required": False, "allow_null": True, "allow_blank": True},
            "is_available": {"required": False},
        }

    def validate_vehicle_number(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Vehicle number is required")
        return value


class DriverAvailabilitySerializer(serializers.Serializer):
    """
    Serializer for toggling driver availability.
    """
    is_available = serializers.BooleanField()
