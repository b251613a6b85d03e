# apps/students/models.py

from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel, ContactModel


class Student(CoreBaseModel, ContactModel):
    """
    A hostel resident. Holds at most one room at a time.
    """
    class StudentStatus(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')

    class Gender(models.TextChoices):
        MALE = 'male', _('Male')
        FEMALE = 'female', _('Female')
        OTHER = 'other', _('Other')

    student_id = models.PositiveIntegerField(
        _('student ID'),
        unique=True,
        validators=[MinValueValidator(1)],
        help_text=_('Numeric identifier issued by the institution')
    )
    first_name = models.CharField(_('first name'), max_length=100)
    last_name = models.CharField(_('last name'), max_length=100)
    date_of_birth = models.DateField(_('date of birth'), null=True, blank=True)
    gender = models.CharField(_('gender'), max_length=10, choices=Gender.choices, blank=True)
    course = models.CharField(_('course'), max_length=100, blank=True)
    year_of_study = models.PositiveSmallIntegerField(_('year of study'), null=True, blank=True)

    hostel = models.ForeignKey(
        'hostels.Hostel',
        on_delete=models.PROTECT,
        related_name='students',
        verbose_name=_('hostel')
    )
    room = models.ForeignKey(
        'hostels.Room',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='students',
        verbose_name=_('room')
    )
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=StudentStatus.choices,
        default=StudentStatus.ACTIVE,
        db_index=True
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile',
        verbose_name=_('portal account')
    )

    class Meta:
        verbose_name = _('Student')
        verbose_name_plural = _('Students')
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['hostel', 'status'], name='student_hostel_status_idx'),
            models.Index(fields=['room'], name='student_room_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.student_id})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_room(self):
        return self.room_id is not None
