from rest_framework import serializers
from django.contrib.auth import authenticate

from .models import User


class UserSerializer(serializers.ModelSerializer):
    student_id = serializers.SerializerMethodField()
    driver_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
            "phone_number",
            "student_id",
            "driver_id",
        ]
        read_only_fields = ["id", "email", "role", "student_id", "driver_id"]

    def get_student_id(self, obj):
        profile = getattr(obj, "student_profile", None)
        return profile.id if profile else None

    def get_driver_id(self, obj):
        profile = getattr(obj, "driver_profile", None)
        return profile.id if profile else None


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get("request"),
            username=data["email"],
            password=data["password"],
        )
        if not user:
            raise serializers.ValidationError("Invalid email or password")
        return user


class RegisterSerializer(serializers.Serializer):
    """
    Self-registration for students and drivers. Admin accounts are
    created through the Django admin only.
    """
    name = serializers.CharField(max_length=150)
    surname = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=5)
    role = serializers.ChoiceField(choices=[User.STUDENT, User.DRIVER])
    contact_details = serializers.CharField(max_length=20)

    # student only
    student_number = serializers.CharField(max_length=20, required=False)
    res_name = serializers.CharField(max_length=100, required=False)
    street_name = serializers.CharField(max_length=100, required=False)
    house_number = serializers.CharField(max_length=20, required=False)

    # driver only
    license = serializers.CharField(max_length=50, required=False)

    STUDENT_FIELDS = ("student_number", "res_name", "street_name", "house_number")

    def validate(self, data):
        if data["role"] == User.STUDENT:
            missing = [name for name in self.STUDENT_FIELDS if not data.get(name)]
            if missing:
                raise serializers.ValidationError({
                    name: "This field is required for students." for name in missing
                })
        elif not data.get("license"):
            raise serializers.ValidationError({
                "license": "License is required for drivers."
            })
        return data


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ProfileUpdateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, min_length=5)

    class Meta:
        model = User
        fields = ["first_name", "last_name", "phone_number", "password"]

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for name, value in validated_data.items():
            setattr(instance, name, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
