from rest_framework.permissions import BasePermission

from accounts.models import User


class IsStudentOwnerOrAdmin(BasePermission):
    """
    Object-level check for student resources: admins see every student,
    a student sees only their own profile and dashboard.
    """
    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.is_admin_role:
            return True
        return getattr(user, "role", None) == User.STUDENT and obj.user_id == user.id
