"""Tells what to show in the Django admin interface for rides app"""

from django.contrib import admin
from .models import RideRequest


@admin.register(RideRequest)
class RideRequestAdmin(admin.ModelAdmin):
    """Ride Request admin"""
    list_display = ['id', 'student', 'driver', 'status', 'pickup_time', 'rating', 'notified', 'created_at']
    list_filter = ['status', 'notified', 'created_at']
    search_fields = ['student__student_number', 'student__user__email', 'driver__license', 'pickup_location', 'destination']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'
