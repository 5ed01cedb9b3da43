"""
Student roster and dashboard services.
"""

from .roster_services import (
    create_student,
    update_student,
    delete_student,
    get_student,
    list_students,
)
from .dashboard_services import get_student_dashboard

__all__ = [
    "create_student",
    "update_student",
    "delete_student",
    "get_student",
    "list_students",
    "get_student_dashboard",
]
