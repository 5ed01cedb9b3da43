from django.utils import timezone
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.models import User
from accounts.permissions import IsAdmin
from reports import services


def _may_view(user, role, profile_attr, subject_id):
    """Admins see everything; drivers and students only their own numbers."""
    if user.is_admin_role:
        return True
    if user.role != role:
        return False
    profile = getattr(user, profile_attr, None)
    return profile is not None and profile.id == subject_id


def _forbidden():
    return Response(
        {"error": "You can only view your own statistics"},
        status=status.HTTP_403_FORBIDDEN
    )


class AdminOverviewView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        return Response(services.get_admin_overview())


class DriverReportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, driver_id):
        if not _may_view(request.user, User.DRIVER, "driver_profile", driver_id):
            return _forbidden()
        return Response(services.get_driver_stats(driver_id))


class DriverMonthlyReportView(APIView):
    """GET ?year=2025 (defaults to the current year)"""
    permission_classes = [IsAuthenticated]

    def get(self, request, driver_id):
        if not _may_view(request.user, User.DRIVER, "driver_profile", driver_id):
            return _forbidden()

        year = request.query_params.get("year", timezone.localdate().year)
        try:
            year = int(year)
        except (TypeError, ValueError):
            return Response({"error": "year must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "driver_id": driver_id,
            "year": year,
            "months": services.get_driver_monthly_rides(driver_id, year),
        })


class StudentReportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, student_id):
        if not _may_view(request.user, User.STUDENT, "student_profile", student_id):
            return _forbidden()
        return Response(services.get_student_stats(student_id))
