from rest_framework import serializers

from vehicles.models import Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    driver_id = serializers.IntegerField(read_only=True, allow_null=True)
    driver_name = serializers.SerializerMethodField()

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "model",
            "plate_number",
            "capacity",
            "driver_id",
            "driver_name",
            "assigned",
            "created_at",
        ]
        read_only_fields = fields

    def get_driver_name(self, obj):
        if obj.driver_id is None:
            return None
        return obj.driver.user.get_full_name()


class VehicleWriteSerializer(serializers.Serializer):
    """
    Plate uniqueness is checked by the service so a clash answers 409,
    not a field validation error.
    """
    model = serializers.CharField(max_length=100)
    plate_number = serializers.CharField(max_length=20)
    capacity = serializers.IntegerField(min_value=1)


class VehicleAssignSerializer(serializers.Serializer):
    driver_id = serializers.IntegerField()
