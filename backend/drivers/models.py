from django.db import models
from django.conf import settings

User = settings.AUTH_USER_MODEL


class DriverProfile(models.Model):
    """Driver-specific details and availability status"""
    AVAILABLE = 'Available'
    NOT_AVAILABLE = 'Not Available'

    STATUS_CHOICES = [
        (AVAILABLE, 'Available'),
        (NOT_AVAILABLE, 'Not Available'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='driver_profile')

    license = models.CharField(max_length=50, unique=True)

    # Flipped to Not Available when a request is assigned, back on cancellation
    availability_status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=NOT_AVAILABLE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'driver'
        ordering = ['id']

    @property
    def is_available(self):
        return self.availability_status == self.AVAILABLE

    def __str__(self):
        return f"{self.user.get_full_name()} - {self.license}"
