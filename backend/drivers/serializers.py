from rest_framework import serializers

from drivers.models import DriverProfile
from vehicles.serializers import VehicleSerializer


class DriverSerializer(serializers.ModelSerializer):
    """
    Driver as listed for admins and shown on the driver dashboard,
    with the vehicle they currently hold (if any).
    """
    user_id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(source="user.first_name", read_only=True)
    surname = serializers.CharField(source="user.last_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    contact_details = serializers.CharField(source="user.phone_number", read_only=True)
    vehicle = serializers.SerializerMethodField()

    class Meta:
        model = DriverProfile
        fields = [
            "id",
            "user_id",
            "name",
            "surname",
            "email",
            "contact_details",
            "license",
            "availability_status",
            "vehicle",
            "created_at",
        ]
        read_only_fields = fields

    def get_vehicle(self, obj):
        vehicle = obj.vehicles.order_by("id").first()
        if vehicle is None:
            return None
        return VehicleSerializer(vehicle).data


class DriverWriteSerializer(serializers.Serializer):
    """
    Admin create/update body.

    {
        "name": "Sipho",
        "surname": "Dlamini",
        "email": "sipho@unilift.co.za",
        "contact_details": "0831234567",
        "license": "DL-55821",
        "availability_status": "Available"   // optional, create only
    }
    """
    name = serializers.CharField(max_length=150)
    surname = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    contact_details = serializers.CharField(max_length=20)
    license = serializers.CharField(max_length=50)
    availability_status = serializers.ChoiceField(
        choices=DriverProfile.STATUS_CHOICES,
        required=False,
    )
    password = serializers.CharField(write_only=True, required=False, min_length=5)

    FIELD_MAP = {
        "name": "first_name",
        "surname": "last_name",
        "email": "email",
        "contact_details": "phone_number",
        "license": "license",
        "availability_status": "availability_status",
        "password": "password",
    }

    def to_service_kwargs(self):
        data = self.validated_data
        return {target: data[source] for source, target in self.FIELD_MAP.items() if source in data}


class DriverAvailabilitySerializer(serializers.Serializer):
    """PATCH /api/drivers/<id>/availability/  {"status": "Available"}"""
    status = serializers.ChoiceField(
        choices=DriverProfile.STATUS_CHOICES,
        error_messages={"invalid_choice": "Invalid status. Must be 'Available' or 'Not Available'."},
    )
