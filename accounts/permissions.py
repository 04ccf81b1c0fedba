from rest_framework import permissions


def is_admin(user):
    return bool(user and user.is_authenticated and getattr(user, 'is_admin_role', False))


class IsAdminRole(permissions.BasePermission):
    """
    تسمح فقط للمسؤولين (role=admin أو superuser).
    """
    message = 'هذه العملية متاحة للمسؤولين فقط'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsProfileOwnerOrAdmin(permissions.BasePermission):
    """
    تسمح للشركة بتعديل بروفايلها فقط، وللمسؤول بتعديل أي بروفايل.
    """
    message = 'Not authorized to update this profile'

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.user_id == request.user.id or is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    قراءة للجميع، والتعديل للمسؤولين فقط.
    """
    message = 'هذه العملية متاحة للمسؤولين فقط'

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)
