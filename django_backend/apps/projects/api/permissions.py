from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsProjectOwnerOrAdmin(BasePermission):
    """Members may read a project; only its creator or staff may change it."""

    def has_object_permission(self, request, view, obj):
        u = request.user
        if not u or not u.is_authenticated:
            return False
        if u.is_staff or request.method in SAFE_METHODS:
            return True
        return obj.created_by_id == u.id
