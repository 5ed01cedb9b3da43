from rest_framework.permissions import BasePermission


class IsAdmin(BasePermission):
    """
    Allows access only to UniLift administrators.
    Django staff accounts count as administrators too.
    """
    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return user.is_admin_role
