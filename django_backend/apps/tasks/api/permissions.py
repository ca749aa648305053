from rest_framework.permissions import BasePermission


class IsProjectMemberOrAdmin(BasePermission):
    """Tasks are editable by anyone on the owning project's board."""

    def has_object_permission(self, request, view, obj):
        u = request.user
        if not u or not u.is_authenticated:
            return False
        if u.is_staff:
            return True
        project = obj.project
        return project.created_by_id == u.id or project.members.filter(id=u.id).exists()


class IsCommentAuthorOrAdmin(BasePermission):
    message = "Not authorized to delete this comment."

    def has_object_permission(self, request, view, obj):
        u = request.user
        return bool(u and u.is_authenticated and (u.is_staff or obj.user_id == u.id))
