# apps/finance/models.py

import secrets
import string
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


def generate_receipt_number():
    """Receipt numbers look like ``REC-20260101120000-X7K2P9QAB``."""
    prefix = getattr(settings, 'HOSTEL_RECEIPT_PREFIX', 'REC')
    suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(9))
    return f"{prefix}-{timezone.now():%Y%m%d%H%M%S}-{suffix}"


class Fee(CoreBaseModel):
    """
    A financial obligation of a student.

    For ``hostel`` fees the amount is usually proposed from the room type
    price, but the stored ``amount`` is whatever the operator submitted.
    """
    class FeeType(models.TextChoices):
        HOSTEL = 'hostel', _('Hostel Fee')
        MESS = 'mess', _('Mess Fee')
        SECURITY = 'security', _('Security Deposit')
        FINE = 'fine', _('Fine')

    class FeeStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        PAID = 'paid', _('Paid')
        OVERDUE = 'overdue', _('Overdue')

    class PaymentMethod(models.TextChoices):
        CASH = 'cash', _('Cash')
        BANK_TRANSFER = 'bank_transfer', _('Bank Transfer')
        CARD = 'card', _('Card')
        ONLINE = 'online', _('Online Payment')
        OTHER = 'other', _('Other')

    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='fees',
        verbose_name=_('student')
    )
    hostel = models.ForeignKey(
        'hostels.Hostel',
        on_delete=models.CASCADE,
        related_name='fees',
        verbose_name=_('hostel')
    )
    fee_type = models.CharField(
        _('fee type'),
        max_length=20,
        choices=FeeType.choices,
        default=FeeType.HOSTEL
    )
    amount = models.DecimalField(
        _('amount'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    due_date = models.DateField(_('due date'))
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=FeeStatus.choices,
        default=FeeStatus.PENDING,
        db_index=True
    )
    paid_date = models.DateField(_('paid date'), null=True, blank=True)
    payment_method = models.CharField(
        _('payment method'),
        max_length=20,
        choices=PaymentMethod.choices,
        blank=True
    )
    receipt_number = models.CharField(
        _('receipt number'),
        max_length=50,
        unique=True,
        default=generate_receipt_number,
        editable=False
    )

    class Meta:
        verbose_name = _('Fee')
        verbose_name_plural = _('Fees')
        ordering = ['-due_date']
        indexes = [
            models.Index(fields=['hostel', 'status'], name='fee_hostel_status_idx'),
            models.Index(fields=['student', 'status'], name='fee_student_status_idx'),
            models.Index(fields=['due_date', 'status'], name='fee_due_status_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.get_fee_type_display()} {self.amount} ({self.status})"

    @property
    def is_overdue(self):
        """Unpaid and past its due date."""
        return self.status != self.FeeStatus.PAID and self.due_date < timezone.localdate()

    @property
    def effective_status(self):
        """Status as shown to users: pending fees past due read as overdue."""
        if self.status == self.FeeStatus.PENDING and self.is_overdue:
            return self.FeeStatus.OVERDUE
        return self.status
