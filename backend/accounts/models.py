from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Extended user model with role selection. Logs in with email."""
    STUDENT = 'student'
    DRIVER = 'driver'
    ADMIN = 'admin'

    ROLE_CHOICES = [
        (STUDENT, 'Student'),
        (DRIVER, 'Driver'),
        (ADMIN, 'Administrator'),
    ]

    # Role & basic info (name/surname live in first_name/last_name)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=STUDENT)
    phone_number = models.CharField(max_length=20, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'users'

    @property
    def is_admin_role(self):
        return self.role == self.ADMIN or self.is_staff

    def __str__(self):
        return f"{self.email} ({self.get_role_display()})"
