from django.db import models


class Vehicle(models.Model):
    """Fleet vehicle. `assigned` mirrors whether a driver is attached."""
    ASSIGNED = 'Y'
    UNASSIGNED = 'N'

    ASSIGNED_CHOICES = [
        (ASSIGNED, 'Assigned'),
        (UNASSIGNED, 'Unassigned'),
    ]

    model = models.CharField(max_length=100)
    plate_number = models.CharField(max_length=20, unique=True)
    capacity = models.PositiveIntegerField()

    driver = models.ForeignKey(
        'drivers.DriverProfile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vehicles'
    )
    assigned = models.CharField(max_length=1, choices=ASSIGNED_CHOICES, default=UNASSIGNED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'vehicle'
        ordering = ['id']

    def save(self, *args, **kwargs):
        self.assigned = self.ASSIGNED if self.driver_id else self.UNASSIGNED
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'driver' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'assigned'}
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.plate_number} ({self.model})"
