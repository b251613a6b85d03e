# apps/finance/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from django.contrib import messages

from .models import Fee
from . import services


@admin.register(Fee)
class FeeAdmin(admin.ModelAdmin):
    """
    Admin interface for Fee model.
    """
    list_display = ('receipt_number', 'student', 'hostel', 'fee_type', 'amount', 'due_date', 'status', 'paid_date')
    list_filter = ('status', 'fee_type', 'hostel', 'payment_method', 'due_date')
    search_fields = ('receipt_number', 'student__first_name', 'student__last_name', 'student__student_id')
    readonly_fields = ('receipt_number', 'created_at', 'updated_at')
    date_hierarchy = 'due_date'
    raw_id_fields = ('student',)
    actions = ['mark_as_paid', 'mark_overdue']

    fieldsets = (
        (_('Fee Information'), {
            'fields': ('receipt_number', 'student', 'hostel', 'fee_type', 'amount', 'due_date')
        }),
        (_('Payment'), {
            'fields': ('status', 'paid_date', 'payment_method')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('student', 'hostel')

    @admin.action(description=_('Mark selected fees as paid'))
    def mark_as_paid(self, request, queryset):
        """Admin action to mark fees as paid today."""
        fees = queryset.exclude(status=Fee.FeeStatus.PAID)
        count = 0
        for fee in fees:
            services.mark_fee_paid(fee)
            count += 1
        self.message_user(request, f'{count} fees marked as paid.', messages.SUCCESS)

    @admin.action(description=_('Mark past-due fees as overdue'))
    def mark_overdue(self, request, queryset):
        updated = services.mark_overdue_fees(queryset)
        self.message_user(request, f'{updated} fees marked as overdue.', messages.WARNING)
