from django.contrib import admin
from students.models import ResAddress, Student


@admin.register(ResAddress)
class ResAddressAdmin(admin.ModelAdmin):
    list_display = ["name", "street_name", "house_number"]
    search_fields = ["name", "street_name"]


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    """Admin panel for student profiles"""

    list_display = [
        "student_number",
        "user",
        "residence",
        "created_at",
    ]

    list_filter = [
        "residence",
    ]

    search_fields = [
        "student_number",
        "user__email",
        "user__first_name",
        "user__last_name",
    ]

    readonly_fields = [
        "created_at",
        "updated_at",
    ]
