# apps/core/context.py
"""
Per-request hostel context.

The caller's role and hostel scope are resolved once per request and passed
explicitly to querysets and services instead of living in module state.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import PermissionDenied, ValidationError

from .exceptions import NotFound


class HostelContext:
    """
    Role and hostel scope of the current caller.

    Super admins may pick any hostel via ``hostel_id`` (query string or body)
    and see every hostel when they don't. Admins and students are pinned to
    their own hostel.
    """

    def __init__(self, user, hostel_id=None, explicit=False):
        self.user = user
        self.hostel_id = hostel_id
        self.explicit = explicit

    @classmethod
    def from_request(cls, request):
        user = request.user
        requested = request.query_params.get('hostel_id')
        if not requested and isinstance(request.data, dict):
            requested = request.data.get('hostel_id')

        if user.is_super_admin:
            return cls(user, requested or user.hostel_id, explicit=bool(requested))

        hostel_id = user.hostel_id
        if user.is_student and hostel_id is None:
            profile = getattr(user, 'student_profile', None)
            hostel_id = profile.hostel_id if profile else None

        if hostel_id is None:
            raise PermissionDenied(_('No hostel assigned to user'))
        return cls(user, hostel_id)

    @property
    def role(self):
        return self.user.role

    @property
    def is_super_admin(self):
        return self.user.is_super_admin

    def scope(self, queryset, field='hostel'):
        """Restrict a queryset to the records visible to this caller."""
        if self.is_super_admin and not self.explicit:
            return queryset
        return queryset.filter(**{f'{field}_id': self.hostel_id})

    def hostel_for_write(self, hostel=None):
        """
        Hostel a newly created record belongs to.

        Only super admins may name a hostel other than their own.
        """
        if hostel is not None and (self.is_super_admin or hostel.pk == self.hostel_id):
            return hostel
        if self.hostel_id is None:
            raise ValidationError({'hostel_id': _('Hostel ID is required')})

        from apps.hostels.models import Hostel
        hostel = Hostel.objects.filter(pk=self.hostel_id).first()
        if hostel is None:
            raise NotFound(_('Hostel not found'))
        return hostel

    def can_access(self, obj, field='hostel'):
        if self.is_super_admin:
            return True
        return getattr(obj, f'{field}_id') == self.hostel_id
