from rest_framework import serializers

from rides.models import RideRequest
from services.ratings import validate_rating
from services.ride_management.exceptions import InvalidRatingError


class RideRequestSerializer(serializers.ModelSerializer):
    """
    Full ride request representation returned by every request endpoint
    and embedded in the student/driver dashboards.
    """
    student_id = serializers.IntegerField(read_only=True)
    student_name = serializers.SerializerMethodField()
    student_number = serializers.CharField(source='student.student_number', read_only=True)
    res_address = serializers.CharField(source='student.res_address', read_only=True)
    driver_id = serializers.IntegerField(read_only=True, allow_null=True)
    driver_name = serializers.SerializerMethodField()

    class Meta:
        model = RideRequest
        fields = [
            'id',
            'student_id',
            'student_name',
            'student_number',
            'res_address',
            'driver_id',
            'driver_name',
            'pickup_location',
            'destination',
            'pickup_time',
            'notes',
            'status',
            'rating',
            'notified',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_student_name(self, obj):
        return obj.student.user.get_full_name()

    def get_driver_name(self, obj):
        if obj.driver_id is None:
            return None
        return obj.driver.user.get_full_name()


class RideRequestCreateSerializer(serializers.Serializer):
    """
    POST /api/requests/

    {
        "student_id": 1,            // optional for students
        "pickup_location": "Res A",
        "destination": "Campus",
        "pickup_time": "2025-03-01T08:00:00",
        "notes": "Two bags"         // optional
    }
    """
    student_id = serializers.IntegerField(required=False)
    pickup_location = serializers.CharField(max_length=255)
    destination = serializers.CharField(max_length=255)
    pickup_time = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RideRequestEditSerializer(serializers.Serializer):
    """Student edit variant of PUT /api/requests/<id>/."""
    pickup_time = serializers.DateTimeField()
    pickup_location = serializers.CharField(max_length=255)
    destination = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RideStatusSerializer(serializers.Serializer):
    """
    Driver status variant. The value is checked against the state machine
    by the service, so unknown statuses still reach it as plain strings.
    """
    status = serializers.CharField(max_length=20)


class StrictRatingField(serializers.Field):
    """Integer 1-5 only. "4", 4.5 and true are all rejected."""

    default_error_messages = {
        'invalid': InvalidRatingError.default_message,
    }

    def to_internal_value(self, data):
        try:
            return validate_rating(data)
        except InvalidRatingError:
            self.fail('invalid')

    def to_representation(self, value):
        return value


class RideRatingSerializer(serializers.Serializer):
    rate = StrictRatingField()
