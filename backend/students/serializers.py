from rest_framework import serializers

from students.models import ResAddress, Student


class ResAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResAddress
        fields = ['id', 'name', 'street_name', 'house_number']


class StudentSerializer(serializers.ModelSerializer):
    """
    Student profile as shown to admins and on the student dashboard.
    Name and contact details are read through from the user account.
    """
    user_id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(source='user.first_name', read_only=True)
    surname = serializers.CharField(source='user.last_name', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    contact_details = serializers.CharField(source='user.phone_number', read_only=True)
    residence = ResAddressSerializer(read_only=True)

    class Meta:
        model = Student
        fields = [
            'id', 'user_id', 'student_number', 'name', 'surname',
            'email', 'contact_details', 'residence', 'res_address',
            'created_at',
        ]
        read_only_fields = fields


class StudentWriteSerializer(serializers.Serializer):
    """
    Admin create/update body.

    {
        "name": "Thandi",
        "surname": "Mokoena",
        "email": "thandi@uni.ac.za",
        "contact_details": "0821234567",
        "student_number": "20231234",
        "res_name": "Kings Court",
        "street_name": "Main Road",
        "house_number": "12"
    }
    """
    name = serializers.CharField(max_length=150)
    surname = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    contact_details = serializers.CharField(max_length=20)
    student_number = serializers.CharField(max_length=20)
    res_name = serializers.CharField(max_length=100)
    street_name = serializers.CharField(max_length=100)
    house_number = serializers.CharField(max_length=20)
    password = serializers.CharField(write_only=True, required=False, min_length=5)

    def validate(self, data):
        # A partial residence would create a half-filled address row
        residence_fields = {'res_name', 'street_name', 'house_number'}
        supplied = residence_fields & set(data)
        if supplied and supplied != residence_fields:
            raise serializers.ValidationError(
                'All residence address fields are required for a student.'
            )
        return data

    def to_service_kwargs(self):
        data = self.validated_data
        mapping = {
            'name': 'first_name',
            'surname': 'last_name',
            'email': 'email',
            'contact_details': 'phone_number',
            'student_number': 'student_number',
            'res_name': 'residence_name',
            'street_name': 'street_name',
            'house_number': 'house_number',
            'password': 'password',
        }
        return {target: data[source] for source, target in mapping.items() if source in data}
