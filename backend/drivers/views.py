from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.models import User
from accounts.permissions import IsAdmin
from drivers.models import DriverProfile
from drivers.serializers import (
    DriverSerializer,
    DriverWriteSerializer,
    DriverAvailabilitySerializer,
)
from services.assignment import set_driver_availability
from vehicles.serializers import VehicleSerializer

from drivers import services


# Utility: admins may act on any driver, drivers only on themselves
def require_self_or_admin(user, driver: DriverProfile):
    if user.is_admin_role:
        return None
    if user.role == User.DRIVER and driver.user_id == user.id:
        return None
    return Response({"error": "You can only access your own driver profile"}, status=403)


class DriverListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        drivers = services.list_drivers()
        return Response(DriverSerializer(drivers, many=True).data)

    def post(self, request):
        serializer = DriverWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        driver, vehicle = services.create_driver(**serializer.to_service_kwargs())

        return Response({
            "message": (
                "Driver added and vehicle assigned successfully"
                if vehicle else
                "Driver added. No free vehicle was available to assign"
            ),
            "driver": DriverSerializer(driver).data,
            "vehicle": VehicleSerializer(vehicle).data if vehicle else None,
        }, status=status.HTTP_201_CREATED)


class DriverDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, driver_id):
        driver = services.get_driver(driver_id)
        denied = require_self_or_admin(request.user, driver)
        if denied:
            return denied

        return Response(DriverSerializer(driver).data)

    def put(self, request, driver_id):
        driver = services.get_driver(driver_id)
        denied = require_self_or_admin(request.user, driver)
        if denied:
            return denied

        serializer = DriverWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fields = serializer.to_service_kwargs()

        # Drivers may edit their details but not go on shift through this route
        if not request.user.is_admin_role:
            fields.pop("availability_status", None)

        driver = services.update_driver(driver.id, **fields)
        return Response({
            "message": "Driver updated successfully",
            "driver": DriverSerializer(driver).data,
        })

    def delete(self, request, driver_id):
        if not request.user.is_admin_role:
            return Response({"error": "Only administrators can delete drivers"}, status=403)

        services.delete_driver(driver_id)
        return Response({"message": "Driver deleted successfully"})


class DriverAvailabilityView(APIView):
    """
    PATCH: driver goes on or off shift.

    {"status": "Available"} or {"status": "Not Available"}
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, driver_id):
        driver = services.get_driver(driver_id)
        denied = require_self_or_admin(request.user, driver)
        if denied:
            return denied

        serializer = DriverAvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data["status"]

        driver = set_driver_availability(driver.id, new_status)

        return Response({
            "message": f"Status updated to {new_status}",
            "driver_id": driver.id,
            "availability_status": driver.availability_status,
        })


class DriverDashboardView(APIView):
    """GET: open requests, stats and fresh status notifications."""
    permission_classes = [IsAuthenticated]

    def get(self, request, driver_id):
        driver = services.get_driver(driver_id)
        denied = require_self_or_admin(request.user, driver)
        if denied:
            return denied

        return Response(services.get_driver_dashboard(driver))
