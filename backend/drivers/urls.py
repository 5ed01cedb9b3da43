from django.urls import path
from .views import (
    DriverListCreateView,
    DriverDetailView,
    DriverAvailabilityView,
    DriverDashboardView,
)

app_name = "drivers"

urlpatterns = [
    path("", DriverListCreateView.as_view(), name="driver-list"),
    path("<int:driver_id>/", DriverDetailView.as_view(), name="driver-detail"),
    path("<int:driver_id>/availability/", DriverAvailabilityView.as_view(), name="driver-availability"),
    path("<int:driver_id>/dashboard/", DriverDashboardView.as_view(), name="driver-dashboard"),
]
