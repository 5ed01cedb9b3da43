from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Authentication endpoints (register, login, refresh, password reset, profile)
    path('api/auth/', include('accounts.urls')),

    # Ride request lifecycle (create, edit, status, cancel, rate, notified)
    path('api/requests/', include('rides.urls')),

    # Roster management + dashboards
    path('api/drivers/', include('drivers.urls')),
    path('api/students/', include('students.urls')),
    path('api/vehicles/', include('vehicles.urls')),

    # Aggregated statistics
    path('api/reports/', include('reports.urls')),
]
