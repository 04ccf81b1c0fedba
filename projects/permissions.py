"""Custom DRF permissions for the projects app."""

from rest_framework import permissions


class IsEntrepreneurOrReadOnly(permissions.BasePermission):
    """Allow public reads; allow writes only for authenticated entrepreneurs.

    For object-level writes, only allow the project owner.
    """

    message = 'Only entrepreneurs can create projects'

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_authenticated and getattr(request.user, 'role', None) == 'entrepreneur'

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        self.message = 'Not authorized to update this project'
        return obj.owner_id == request.user.id
