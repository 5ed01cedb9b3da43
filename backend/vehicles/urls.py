from django.urls import path
from .views import (
    VehicleListCreateView,
    VehicleDetailView,
    VehicleAssignView,
    DriverVehicleView,
)

app_name = "vehicles"

urlpatterns = [
    path("", VehicleListCreateView.as_view(), name="vehicle-list"),
    path("<int:vehicle_id>/", VehicleDetailView.as_view(), name="vehicle-detail"),
    path("<int:vehicle_id>/assign/", VehicleAssignView.as_view(), name="vehicle-assign"),
    path("driver/<int:driver_id>/", DriverVehicleView.as_view(), name="driver-vehicle"),
]
