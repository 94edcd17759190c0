from rest_framework.permissions import BasePermission, SAFE_METHODS
from .models import ADMIN_ROLES


class IsAdmin(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view):
        return (
            request.user.is_authenticated and
            request.user.role in ADMIN_ROLES
        )


class IsAdminOrReadOnly(BasePermission):
    """
    Any authenticated user may read; only admins may write.
    """
    message = "Admin access required"

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.role in ADMIN_ROLES


class IsAdminOrOwner(BasePermission):
    """
    Object-level: admins see everything, other users only rows they own.
    """

    def has_object_permission(self, request, view, obj):
        if request.user.role in ADMIN_ROLES:
            return True
        owner_id = getattr(obj, "user_id", None)
        return owner_id is not None and owner_id == request.user.id
