from django.contrib import admin
from drivers.models import DriverProfile


@admin.register(DriverProfile)
class DriverProfileAdmin(admin.ModelAdmin):
    """Admin panel for managing Driver Profiles"""

    list_display = [
        "user",
        "license",
        "availability_status",
        "created_at",
        "updated_at",
    ]

    list_filter = [
        "availability_status",
    ]

    search_fields = [
        "user__email",
        "user__first_name",
        "user__last_name",
        "license",
    ]

    readonly_fields = [
        "created_at",
        "updated_at",
    ]

    ordering = ("id",)
