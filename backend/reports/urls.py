from django.urls import path

from .views import (
    AdminOverviewView,
    DriverReportView,
    DriverMonthlyReportView,
    StudentReportView,
)

app_name = "reports"

urlpatterns = [
    path("overview/", AdminOverviewView.as_view(), name="overview"),
    path("drivers/<int:driver_id>/", DriverReportView.as_view(), name="driver"),
    path("drivers/<int:driver_id>/monthly/", DriverMonthlyReportView.as_view(), name="driver-monthly"),
    path("students/<int:student_id>/", StudentReportView.as_view(), name="student"),
]
