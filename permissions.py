from rest_framework import permissions


class IsStaffOrReadOnly(permissions.BasePermission):

    def has_permission(self, request, view):
        # Read-only safe methods are allowed
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class IsBranchAuthenticated(permissions.BasePermission):
    """Grants access to requests authenticated with a branch portal token."""
    message = "인증이 필요합니다."

    def has_permission(self, request, view):
        return getattr(request.user, "branch", None) is not None and getattr(request.user, "is_branch", False)
