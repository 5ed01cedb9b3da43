from django.contrib import admin
from vehicles.models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ["plate_number", "model", "capacity", "driver", "assigned"]
    list_filter = ["assigned"]
    search_fields = ["plate_number", "model"]
    # Kept in sync with `driver` by Vehicle.save()
    readonly_fields = ["assigned", "created_at", "updated_at"]
