from django.db import models
from django.conf import settings


class ResAddress(models.Model):
    """Residence a student lives in (shared by everyone at the same address)."""
    name = models.CharField(max_length=100)
    street_name = models.CharField(max_length=100)
    house_number = models.CharField(max_length=20)

    class Meta:
        db_table = 'res_address'
        constraints = [
            models.UniqueConstraint(
                fields=['name', 'street_name', 'house_number'],
                name='unique_res_address'
            )
        ]

    def __str__(self):
        return f"{self.name}, {self.house_number} {self.street_name}"


class Student(models.Model):
    """Student-specific details. Name, email and contact details live on the user."""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='student_profile'
    )
    student_number = models.CharField(max_length=20, unique=True)
    residence = models.ForeignKey(
        ResAddress,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'student'
        ordering = ['id']

    @property
    def res_address(self):
        return str(self.residence) if self.residence else "N/A"

    def __str__(self):
        return f"{self.student_number} - {self.user.get_full_name()}"
