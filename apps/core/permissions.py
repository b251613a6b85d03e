# apps/core/permissions.py

from rest_framework.permissions import BasePermission


class IsHostelAdmin(BasePermission):
    """Admins and super admins manage rooms, students, fees and transfers."""
    message = 'Administrator access is required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_hostel_admin)


class IsSuperAdminOrReadOnly(IsHostelAdmin):
    """Any hostel admin may read; only super admins may write."""

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            return True
        return request.user.is_super_admin


class IsStudent(BasePermission):
    """Portal access for users linked to a student record."""
    message = 'Student portal access requires a linked student profile.'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user and user.is_authenticated and user.is_student
            and hasattr(user, 'student_profile')
        )
