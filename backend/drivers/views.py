from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from drivers.models import DriverProfile
from drivers.serializers import DriverProfileSerializer, DriverAvailabilitySerializer
from rides.serializers import RideSerializer
from services import ride_management

from drivers import services


# Utility: fetch the caller's driver profile or an error response
def require_driver(user):
    try:
        return True, user.driver_profile
    except DriverProfile.DoesNotExist:
        return False, Response(
            {"error": "Driver vehicle profile not found"},
            status=status.HTTP_404_NOT_FOUND
        )


class DriverProfileView(APIView):
    """
    GET: the caller's vehicle profile.
    POST: create or update it.

    POST Body:
    {
        "vehicle_type": "car",     // auto | car | bike
        "vehicle_number": "KA-01-AB-1234",
        "license_number": "DL-0420110012345"   // optional
    }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ok, profile = require_driver(request.user)
        if ok is False:
            return profile  # Response object

        return Response(DriverProfileSerializer(profile).data)

    def post(self, request):
        existing = DriverProfile.objects.filter(user=request.user).first()
        serializer = DriverProfileSerializer(existing, data=request.data, partial=existing is not None)
        serializer.is_valid(raise_exception=True)

        profile, created = services.save_driver_profile(request.user, serializer.validated_data)

        return Response(
            DriverProfileSerializer(profile).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class DriverAvailabilityView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ok, profile = require_driver(request.user)
        if ok is False:
            return profile

        return Response({"is_available": profile.is_available})

    def put(self, request):
        ok, profile = require_driver(request.user)
        if ok is False:
            return profile

        serializer = DriverAvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        is_available = serializer.validated_data["is_available"]

        services.set_availability(profile, is_available)

        return Response({
            "message": "You are now available" if is_available else "You are now offline",
            "is_available": is_available,
        })


class AvailableRidesView(APIView):
    """Pending rides for the driver's vehicle type."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ok, profile = require_driver(request.user)
        if ok is False:
            return profile

        # If not available, return empty
        if not profile.is_available:
            return Response({
                "rides": [],
                "count": 0,
                "message": "Set yourself available to see ride requests."
            })

        rides = ride_management.list_available_rides(request.user)
        serialized = RideSerializer(rides, many=True)

        return Response({"rides": serialized.data, "count": len(serialized.data)})


class DriverRidesView(APIView):
    """Rides assigned to the driver; ``?history=true`` includes finished ones."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ok, profile = require_driver(request.user)
        if ok is False:
            return profile

        history = request.query_params.get("history", "").lower() in ("1", "true", "yes")
        rides = ride_management.list_driver_rides(request.user, active_only=not history)
        serialized = RideSerializer(rides, many=True)

        return Response({"count": len(serialized.data), "rides": serialized.data})
