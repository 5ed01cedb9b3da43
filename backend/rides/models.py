from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class RideRequest(models.Model):
    """A student's trip booking. Status strings are stored verbatim."""

    PENDING = 'Pending'
    ASSIGNED = 'Assigned'
    IN_PROGRESS = 'In_progress'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (ASSIGNED, 'Assigned'),
        (IN_PROGRESS, 'In progress'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    # Foreign keys
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='ride_requests'
    )

    driver = models.ForeignKey(
        'drivers.DriverProfile',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='ride_requests'
    )

    # Trip details
    pickup_location = models.CharField(max_length=255)
    destination = models.CharField(max_length=255)
    pickup_time = models.DateTimeField()
    notes = models.TextField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)

    # Set once, only after completion; 0 is treated as unset (legacy rows)
    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )

    # One-shot client notification gate, never reset
    notified = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'request'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='request_status_idx'),
        ]

    @property
    def is_rated(self):
        return self.rating not in (None, 0)

    def __str__(self):
        return f"Request #{self.id} - {self.student} - {self.status}"
