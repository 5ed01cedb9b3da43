from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAdmin
from drivers.models import DriverProfile
from services.assignment import assign_vehicle, release_vehicle_from_driver
from services.ride_management.exceptions import DriverNotFoundError
from vehicles.models import Vehicle
from vehicles.serializers import (
    VehicleSerializer,
    VehicleWriteSerializer,
    VehicleAssignSerializer,
)

from vehicles import services


class VehicleListCreateView(APIView):
    """
    GET: the whole fleet with the driver holding each vehicle.
    POST: add a vehicle (starts unassigned).
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        return Response(VehicleSerializer(services.list_vehicles(), many=True).data)

    def post(self, request):
        serializer = VehicleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vehicle = services.create_vehicle(**serializer.validated_data)

        return Response({
            "message": "Vehicle added successfully",
            "vehicle": VehicleSerializer(vehicle).data,
        }, status=status.HTTP_201_CREATED)


class VehicleDetailView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, vehicle_id):
        return Response(VehicleSerializer(services.get_vehicle(vehicle_id)).data)

    def put(self, request, vehicle_id):
        serializer = VehicleWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        vehicle = services.update_vehicle(vehicle_id, **serializer.validated_data)

        return Response({
            "message": "Vehicle updated successfully",
            "vehicle": VehicleSerializer(vehicle).data,
        })

    def delete(self, request, vehicle_id):
        services.delete_vehicle(vehicle_id)
        return Response({"message": "Vehicle deleted successfully"})


class VehicleAssignView(APIView):
    """POST {"driver_id": 3}: hand a free vehicle to a driver."""
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, vehicle_id):
        serializer = VehicleAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vehicle = assign_vehicle(vehicle_id, serializer.validated_data["driver_id"])

        return Response({
            "message": "Vehicle assigned successfully",
            "vehicle": VehicleSerializer(vehicle).data,
        })


class DriverVehicleView(APIView):
    """
    GET: the vehicle a driver holds (the driver themselves or an admin).
    DELETE: admin takes the vehicle back; it returns to the free pool.
    """
    permission_classes = [IsAuthenticated]

    def _get_driver(self, driver_id):
        try:
            return DriverProfile.objects.get(id=driver_id)
        except DriverProfile.DoesNotExist:
            raise DriverNotFoundError()

    def get(self, request, driver_id):
        driver = self._get_driver(driver_id)
        if not request.user.is_admin_role and driver.user_id != request.user.id:
            return Response({"error": "You can only view your own vehicle"}, status=403)

        vehicle = Vehicle.objects.filter(driver=driver).order_by("id").first()
        return Response({
            "driver_id": driver.id,
            "vehicle": VehicleSerializer(vehicle).data if vehicle else None,
        })

    def delete(self, request, driver_id):
        if not request.user.is_admin_role:
            return Response({"error": "Only administrators can unassign vehicles"}, status=403)

        driver = self._get_driver(driver_id)
        released = release_vehicle_from_driver(driver)

        if not released:
            return Response(
                {"error": "No vehicle is assigned to this driver"},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response({"message": "Vehicle unassigned successfully", "released": released})
