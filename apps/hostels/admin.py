# apps/hostels/admin.py

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import HostelError

from .forms import RoomForm, RoomTypeForm
from .models import Hostel, RoomType, Room, RoomTransfer
from . import services


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ['room_number', 'floor', 'room_type', 'capacity', 'occupancy_count', 'is_under_maintenance']
    readonly_fields = ['room_number', 'floor', 'room_type', 'capacity', 'occupancy_count', 'is_under_maintenance']
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Hostel)
class HostelAdmin(admin.ModelAdmin):
    list_display = [
        'name', 'code', 'total_capacity', 'current_occupancy',
        'occupancy_percentage', 'is_active'
    ]
    list_filter = ['is_active']
    search_fields = ['name', 'code', 'city']
    list_editable = ['is_active']
    readonly_fields = ['total_capacity', 'current_occupancy', 'occupancy_percentage', 'created_at', 'updated_at']
    inlines = [RoomInline]

    fieldsets = (
        (_('Basic Information'), {
            'fields': ('name', 'code', 'description', 'is_active')
        }),
        (_('Occupancy'), {
            'fields': ('total_capacity', 'current_occupancy', 'occupancy_percentage')
        }),
        (_('Address & Contact'), {
            'fields': (
                'address_line_1', 'address_line_2', 'city',
                'state', 'postal_code', 'country',
                'phone', 'email'
            )
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def occupancy_percentage(self, obj):
        return f"{obj.occupancy_percentage}%"
    occupancy_percentage.short_description = _('Occupancy %')


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    form = RoomTypeForm
    list_display = ['name', 'capacity', 'price_per_month', 'room_count']
    search_fields = ['name']
    ordering = ['capacity', 'name']

    def room_count(self, obj):
        return obj.rooms.count()
    room_count.short_description = _('Rooms')

    def save_model(self, request, obj, form, change):
        services.save_room_type(obj)

    def delete_model(self, request, obj):
        services.delete_room_type(obj)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    form = RoomForm
    list_display = [
        'room_number', 'hostel', 'floor', 'room_type', 'capacity',
        'occupancy_count', 'capacity_remaining', 'status_display', 'is_under_maintenance'
    ]
    list_filter = ['hostel', 'room_type', 'floor', 'is_under_maintenance']
    search_fields = ['room_number', 'hostel__name']
    readonly_fields = ['occupancy_count', 'capacity_remaining', 'status_display', 'created_at', 'updated_at']
    actions = ['recount_occupancy']

    fieldsets = (
        (_('Room'), {
            'fields': ('hostel', 'room_number', 'room_type', 'floor', 'amenities')
        }),
        (_('Capacity & Status'), {
            'fields': (
                'capacity', 'occupancy_count', 'capacity_remaining',
                'is_under_maintenance', 'status_display'
            )
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_display(self, obj):
        if obj.capacity is None:
            return '-'
        return obj.status.label
    status_display.short_description = _('Status')

    def save_model(self, request, obj, form, change):
        services.save_room(obj)

    def delete_model(self, request, obj):
        services.delete_room(obj)

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('hostel', 'room_type')

    @admin.action(description=_('Recount occupancy from assigned students'))
    def recount_occupancy(self, request, queryset):
        for room in queryset:
            try:
                services.recount_occupancy(room)
            except HostelError as e:
                self.message_user(request, e.message, level=messages.ERROR)
        self.message_user(request, _('Occupancy recounted.'))


@admin.register(RoomTransfer)
class RoomTransferAdmin(admin.ModelAdmin):
    list_display = [
        'student', 'from_room', 'to_room', 'status', 'created_at',
        'decided_by', 'transfer_date'
    ]
    list_filter = ['status', 'hostel']
    search_fields = ['student__first_name', 'student__last_name', 'student__student_id']
    readonly_fields = ['status', 'decided_by', 'decided_at', 'transfer_date', 'created_at', 'updated_at']
    actions = ['approve_transfers', 'reject_transfers']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related(
            'student', 'from_room', 'to_room', 'decided_by'
        )

    def _decide(self, request, queryset, decide):
        done = 0
        for transfer in queryset:
            try:
                decide(transfer, decided_by=request.user)
                done += 1
            except HostelError as e:
                self.message_user(request, f"{transfer}: {e.message}", level=messages.ERROR)
        if done:
            self.message_user(request, _('%(count)s transfer requests updated.') % {'count': done})

    @admin.action(description=_('Approve selected transfer requests'))
    def approve_transfers(self, request, queryset):
        self._decide(request, queryset, services.approve_transfer)

    @admin.action(description=_('Reject selected transfer requests'))
    def reject_transfers(self, request, queryset):
        self._decide(request, queryset, services.reject_transfer)
