# apps/hostels/models.py

from django.db import models
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _
from django.core.exceptions import ValidationError

from apps.core.models import CoreBaseModel, AddressModel, ContactModel


class Hostel(CoreBaseModel, AddressModel, ContactModel):
    """
    Model for managing hostels and their basic information.
    """
    name = models.CharField(_('hostel name'), max_length=200)
    code = models.CharField(_('hostel code'), max_length=20, unique=True)
    description = models.TextField(_('description'), blank=True)
    is_active = models.BooleanField(_('is active'), default=True)

    class Meta:
        verbose_name = _('Hostel')
        verbose_name_plural = _('Hostels')
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def total_capacity(self):
        return self.rooms.aggregate(total=models.Sum('capacity'))['total'] or 0

    @property
    def current_occupancy(self):
        return self.rooms.aggregate(total=models.Sum('occupancy_count'))['total'] or 0

    @property
    def occupancy_percentage(self):
        """Calculate occupancy percentage."""
        capacity = self.total_capacity
        if capacity > 0:
            return round((self.current_occupancy / capacity) * 100, 2)
        return 0


class RoomType(CoreBaseModel):
    """
    Template shared by many rooms: how many occupants a room may hold and
    what a month in it costs.
    """
    name = models.CharField(_('type name'), max_length=50, unique=True)
    capacity = models.PositiveIntegerField(
        _('capacity'),
        validators=[MinValueValidator(1)],
        help_text=_('Maximum occupants for rooms of this type')
    )
    price_per_month = models.DecimalField(
        _('price per month'),
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text=_('Proposed monthly hostel fee for rooms of this type')
    )
    description = models.TextField(_('description'), blank=True)

    class Meta:
        verbose_name = _('Room Type')
        verbose_name_plural = _('Room Types')
        ordering = ['capacity', 'name']

    def __str__(self):
        return self.name


class Room(CoreBaseModel):
    """
    Model for individual rooms within hostels.

    ``occupancy_count`` is only mutated by the allocation and transfer
    services in ``apps.hostels.services``. ``status`` is derived on read;
    only the maintenance flag is stored.
    """
    class RoomStatus(models.TextChoices):
        AVAILABLE = 'available', _('Available')
        PARTIALLY_OCCUPIED = 'partially_occupied', _('Partially Occupied')
        OCCUPIED = 'occupied', _('Occupied')
        MAINTENANCE = 'maintenance', _('Maintenance')

    hostel = models.ForeignKey(
        Hostel,
        on_delete=models.CASCADE,
        related_name='rooms',
        verbose_name=_('hostel')
    )
    room_number = models.CharField(_('room number'), max_length=20)
    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.PROTECT,
        related_name='rooms',
        verbose_name=_('room type')
    )
    floor = models.IntegerField(_('floor number'), null=True, blank=True)
    capacity = models.PositiveIntegerField(_('capacity'), validators=[MinValueValidator(1)])
    occupancy_count = models.PositiveIntegerField(_('occupancy count'), default=0, editable=False)
    is_under_maintenance = models.BooleanField(_('under maintenance'), default=False)
    amenities = models.TextField(_('room amenities'), blank=True)

    class Meta:
        verbose_name = _('Room')
        verbose_name_plural = _('Rooms')
        ordering = ['hostel', 'room_number']
        constraints = [
            models.UniqueConstraint(fields=['hostel', 'room_number'], name='unique_room_number_per_hostel'),
            models.CheckConstraint(
                condition=models.Q(occupancy_count__lte=models.F('capacity')),
                name='room_occupancy_within_capacity'
            ),
        ]
        indexes = [
            models.Index(fields=['hostel', 'is_under_maintenance'], name='room_hostel_maint_idx'),
        ]

    def __str__(self):
        return f"{self.hostel.name} - Room {self.room_number}"

    def clean(self):
        if self.capacity is not None and self.capacity < 1:
            raise ValidationError({'capacity': _('Room capacity must be at least 1.')})
        if self.room_type_id and self.capacity and self.capacity > self.room_type.capacity:
            raise ValidationError({
                'capacity': _('Room capacity cannot exceed the room type capacity (%(max)s).') % {
                    'max': self.room_type.capacity
                }
            })
        if self.capacity and self.occupancy_count > self.capacity:
            raise ValidationError({'capacity': _('Current occupancy cannot exceed room capacity.')})

    @property
    def capacity_remaining(self):
        """Free places left in the room."""
        return self.capacity - self.occupancy_count

    @property
    def status(self):
        """
        Derived status, first match wins: maintenance flag, empty,
        partially filled, full.
        """
        if self.is_under_maintenance:
            return self.RoomStatus.MAINTENANCE
        if self.occupancy_count == 0:
            return self.RoomStatus.AVAILABLE
        if self.occupancy_count < self.capacity:
            return self.RoomStatus.PARTIALLY_OCCUPIED
        return self.RoomStatus.OCCUPIED

    @property
    def is_eligible(self):
        """Whether the room can take one more student."""
        return not self.is_under_maintenance and self.capacity_remaining > 0

    @property
    def price_per_month(self):
        return self.room_type.price_per_month

    def get_current_residents(self):
        """Get current residents of this room."""
        return self.students.all()


class RoomTransfer(CoreBaseModel):
    """
    A request to move a student from one room to another.

    Only ``pending`` requests may be decided; ``approved`` and ``rejected``
    are terminal.
    """
    class TransferStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        APPROVED = 'approved', _('Approved')
        REJECTED = 'rejected', _('Rejected')

    hostel = models.ForeignKey(
        Hostel,
        on_delete=models.CASCADE,
        related_name='room_transfers',
        verbose_name=_('hostel')
    )
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='room_transfers',
        verbose_name=_('student')
    )
    from_room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transfers_out',
        verbose_name=_('from room')
    )
    to_room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        related_name='transfers_in',
        verbose_name=_('to room')
    )
    reason = models.TextField(_('reason'), blank=True)
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=TransferStatus.choices,
        default=TransferStatus.PENDING,
        db_index=True
    )
    decided_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_room_transfers',
        verbose_name=_('decided by')
    )
    decided_at = models.DateTimeField(_('decided at'), null=True, blank=True)
    transfer_date = models.DateField(_('transfer date'), null=True, blank=True)
    admin_notes = models.TextField(_('admin notes'), blank=True)

    class Meta:
        verbose_name = _('Room Transfer')
        verbose_name_plural = _('Room Transfers')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['hostel', 'status'], name='transfer_hostel_status_idx'),
            models.Index(fields=['student', 'status'], name='transfer_student_status_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.from_room} -> {self.to_room} ({self.status})"

    @property
    def requested_at(self):
        return self.created_at

    @property
    def is_pending(self):
        return self.status == self.TransferStatus.PENDING
