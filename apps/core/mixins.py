from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import PermissionDenied

from .context import HostelContext


class HostelScopedMixin:
    """
    Mixin for API views whose records belong to a hostel.

    Resolves the caller's ``HostelContext`` once per request, filters the
    queryset to the hostels the caller can see and stamps new records with
    the caller's hostel.
    """
    hostel_field = 'hostel'

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.hostel_context = HostelContext.from_request(request)

    def get_queryset(self):
        queryset = super().get_queryset()
        return self.hostel_context.scope(queryset, self.hostel_field)

    def perform_create(self, serializer):
        hostel = self.hostel_context.hostel_for_write(serializer.validated_data.get('hostel'))
        serializer.save(hostel=hostel)

    def check_hostel_access(self, obj, field=None):
        """Raise unless ``obj`` belongs to a hostel the caller may act on."""
        if not self.hostel_context.can_access(obj, field or self.hostel_field):
            raise PermissionDenied(_("You don't have permission to access this hostel."))
