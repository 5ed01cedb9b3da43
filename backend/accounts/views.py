import logging

from django.db import transaction
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from common.utils import format_phone_number, generate_random_password
from drivers.models import DriverProfile
from drivers.services import create_driver
from students.services import create_student

from .models import User
from .serializers import (
    RegisterSerializer,
    LoginSerializer,
    UserSerializer,
    ForgotPasswordSerializer,
    ProfileUpdateSerializer,
)
from .tasks import send_password_reset_sms

logger = logging.getLogger(__name__)

RESET_RESPONSE = "If an account is found, a password reset SMS has been sent."


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class RegisterView(APIView):
    """
    Register a new student or driver

    POST Body:
    {
        "name": "Thandi",
        "surname": "Mokoena",
        "email": "thandi@uni.ac.za",
        "password": "secret123",
        "role": "student",              // or "driver"
        "contact_details": "0821234567",
        "student_number": "20231234",   // students
        "res_name": "Kings Court",      // students
        "street_name": "Main Road",     // students
        "house_number": "12",           // students
        "license": "DL-55821"           // drivers
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        common = dict(
            first_name=data['name'],
            last_name=data['surname'],
            email=data['email'],
            phone_number=data['contact_details'],
            password=data['password'],
        )

        vehicle = None
        if data['role'] == User.STUDENT:
            profile = create_student(
                student_number=data['student_number'],
                residence_name=data['res_name'],
                street_name=data['street_name'],
                house_number=data['house_number'],
                **common
            )
        else:
            # Self-registered drivers start off shift
            profile, vehicle = create_driver(
                license=data['license'],
                availability_status=DriverProfile.NOT_AVAILABLE,
                **common
            )

        user = profile.user
        logger.info("Registered %s %s", user.role, user.id)

        return Response({
            'message': 'User registered successfully',
            'user': UserSerializer(user).data,
            'assigned_vehicle': vehicle.plate_number if vehicle else None,
            'tokens': _tokens_for(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login with email and password to get JWT tokens

    POST Body:
    {
        "email": "thandi@uni.ac.za",
        "password": "secret123"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        # Get the user object from the validated data
        user = serializer.validated_data

        return Response({
            "message": "Login successful",
            "user": UserSerializer(user).data,
            "tokens": _tokens_for(user),
        }, status=status.HTTP_200_OK)


class RefreshTokenView(APIView):
    """
    Refresh JWT access token

    POST Body:
    {
        "refresh": "your_refresh_token"
    }
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        refresh_token = request.data.get('refresh')

        if not refresh_token:
            return Response(
                {'error': 'Refresh token is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            refresh = RefreshToken(refresh_token)
        except TokenError:
            return Response(
                {'error': 'Invalid refresh token'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        return Response({'access': str(refresh.access_token)})


class ForgotPasswordView(APIView):
    """
    Reset a password and text the new one to the account's phone.

    The answer is the same whether or not the email exists.
    """
    permission_classes = (AllowAny,)
    authentication_classes = []

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(
            email__iexact=serializer.validated_data['email'],
            role__in=[User.STUDENT, User.DRIVER],
        ).first()

        if user is None or not user.phone_number:
            logger.info("Password reset requested for unknown or unreachable account")
            return Response({'message': RESET_RESPONSE})

        new_password = generate_random_password()
        phone_number = format_phone_number(user.phone_number)

        with transaction.atomic():
            user.set_password(new_password)
            user.save(update_fields=['password'])
            # Only text the password once it is actually stored
            transaction.on_commit(
                lambda: send_password_reset_sms.delay(phone_number, new_password)
            )

        logger.info("Password reset for user %s", user.id)
        return Response({'message': RESET_RESPONSE})


class ProfileView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response({
            'message': 'Profile updated successfully',
            'user': UserSerializer(user).data,
        })
