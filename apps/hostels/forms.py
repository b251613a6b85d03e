# apps/hostels/forms.py

from django import forms
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import InvalidCapacity

from .models import Hostel, Room, RoomType
from . import services


class RoomForm(forms.ModelForm):
    """Form for creating and updating rooms."""

    class Meta:
        model = Room
        fields = [
            'hostel', 'room_number', 'room_type', 'floor', 'capacity',
            'is_under_maintenance', 'amenities'
        ]
        widgets = {
            'room_number': forms.TextInput(attrs={
                'placeholder': _('e.g., 101, 201A')
            }),
            'capacity': forms.NumberInput(attrs={'min': '1'}),
            'amenities': forms.Textarea(attrs={
                'rows': 2,
                'placeholder': _('Room-specific amenities')
            }),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['hostel'].queryset = Hostel.objects.filter(is_active=True)

    def clean_room_number(self):
        room_number = self.cleaned_data.get('room_number')
        hostel = self.cleaned_data.get('hostel')

        if room_number and hostel:
            # Check for duplicate room number in the same hostel
            existing = Room.objects.filter(
                hostel=hostel,
                room_number=room_number
            )
            if self.instance and self.instance.pk:
                existing = existing.exclude(pk=self.instance.pk)

            if existing.exists():
                raise ValidationError(_('Room number already exists in this hostel.'))

        return room_number

    def clean(self):
        cleaned_data = super().clean()
        room_type = cleaned_data.get('room_type')
        capacity = cleaned_data.get('capacity')

        if room_type and capacity:
            try:
                services.validate_capacity(room_type, capacity, self.instance.occupancy_count)
            except InvalidCapacity as e:
                self.add_error('capacity', e.message)

        return cleaned_data


class RoomTypeForm(forms.ModelForm):
    """Form for room types; capacity may not drop below a room using the type."""

    class Meta:
        model = RoomType
        fields = ['name', 'capacity', 'price_per_month', 'description']

    def clean_capacity(self):
        capacity = self.cleaned_data.get('capacity')
        if capacity and not self.instance._state.adding:
            largest = self.instance.rooms.order_by('-capacity').values_list('capacity', flat=True).first()
            if largest and capacity < largest:
                raise ValidationError(
                    _('Rooms of this type hold up to %(largest)s students.') % {'largest': largest}
                )
        return capacity
