# apps/students/admin.py

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import HostelError
from apps.hostels import services as hostel_services

from .models import Student
from . import services


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    """
    Admin interface for hostel residents. Rooms are assigned through the
    allocation service, never by editing the record directly.
    """
    list_display = ('student_id', 'full_name', 'hostel', 'room', 'course', 'year_of_study', 'status')
    list_filter = ('status', 'hostel', 'gender', 'year_of_study')
    search_fields = ('student_id', 'first_name', 'last_name', 'email', 'course')
    readonly_fields = ('room', 'created_at', 'updated_at')
    raw_id_fields = ('user',)
    actions = ['release_rooms']

    fieldsets = (
        (_('Student'), {
            'fields': ('student_id', 'first_name', 'last_name', 'date_of_birth', 'gender')
        }),
        (_('Studies'), {
            'fields': ('course', 'year_of_study')
        }),
        (_('Residence'), {
            'fields': ('hostel', 'room', 'status')
        }),
        (_('Contact'), {
            'fields': ('phone', 'email', 'user')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('hostel', 'room')

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.room_id is not None:
            return self.readonly_fields + ('hostel',)
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        if change and 'status' in form.changed_data:
            status = obj.status
            obj.status = form.initial.get('status', obj.status)
            super().save_model(request, obj, form, change)
            services.set_student_status(obj, status)
        else:
            super().save_model(request, obj, form, change)

    def delete_model(self, request, obj):
        services.delete_student(obj)

    @admin.action(description=_('Release the rooms of selected students'))
    def release_rooms(self, request, queryset):
        released = 0
        for student in queryset.filter(room__isnull=False):
            try:
                hostel_services.release_room(student)
                released += 1
            except HostelError as e:
                self.message_user(request, f"{student}: {e.message}", level=messages.ERROR)
        self.message_user(request, f'{released} rooms released.', messages.SUCCESS)
