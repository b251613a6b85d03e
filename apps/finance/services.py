# apps/finance/services.py
"""
Room-type fee calculation and the fee lifecycle.
"""

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Count, Q, Sum
from django.utils import timezone
from django.utils.translation import gettext as _

from apps.core.exceptions import InvalidTransition

from .models import Fee

logger = logging.getLogger(__name__)


class FeeQuote:
    """
    Monthly hostel fee proposed for a student from their room type price.

    ``calculated_amount`` is ``None`` when the student has no room or the
    room type has no price; that is a valid, empty result.
    """

    def __init__(self, has_room, calculated_amount=None, room=None, message=''):
        self.has_room = has_room
        self.calculated_amount = calculated_amount
        self.room = room
        self.message = message

    def as_dict(self):
        data = {
            'has_room': self.has_room,
            'calculated_amount': self.calculated_amount,
        }
        if self.room is not None:
            data.update({
                'room_id': self.room.pk,
                'room_number': self.room.room_number,
                'room_type_id': self.room.room_type_id,
                'room_type': self.room.room_type.name,
            })
        if self.message:
            data['message'] = self.message
        return data


def calculate_hostel_fee(student):
    """Resolve student -> room -> room type -> price per month."""
    room = student.room
    if room is None:
        return FeeQuote(False, message='Student does not have a room assigned')

    price = room.room_type.price_per_month
    if price is None:
        return FeeQuote(True, room=room, message='Room type does not have a price set')

    return FeeQuote(True, calculated_amount=price, room=room)


class FeeDraft:
    """
    Fee being prepared by an operator before submission.

    While the fee type is ``hostel`` the draft proposes the calculated room
    price; selecting another type clears the proposal and selecting
    ``hostel`` again restores the last calculated value. An amount entered
    by the operator always wins.
    """

    def __init__(self, student, fee_type=Fee.FeeType.HOSTEL, due_date=None):
        self.student = student
        self.fee_type = fee_type
        self.due_date = due_date
        self.manual_amount = None
        self.quote = calculate_hostel_fee(student)
        self.proposed_amount = self._proposal()

    def _proposal(self):
        if self.fee_type == Fee.FeeType.HOSTEL:
            return self.quote.calculated_amount
        return None

    def select_fee_type(self, fee_type):
        self.fee_type = fee_type
        self.proposed_amount = self._proposal()

    def enter_amount(self, amount):
        self.manual_amount = Decimal(str(amount)) if amount not in (None, '') else None

    @property
    def amount(self):
        if self.manual_amount is not None:
            return self.manual_amount
        return self.proposed_amount

    def submit(self, **extra):
        return create_fee(
            self.student, self.fee_type, amount=self.amount, due_date=self.due_date, **extra
        )


def create_fee(student, fee_type, amount=None, due_date=None, payment_method='', hostel=None):
    """
    Create a pending fee.

    A ``hostel`` fee without an amount takes the calculated room price. A
    submitted amount is stored as given, whether or not it matches the
    calculation.
    """
    if due_date is None:
        raise ValidationError({'due_date': 'Due date is required'})

    if amount in (None, '') and fee_type == Fee.FeeType.HOSTEL:
        quote = calculate_hostel_fee(student)
        if quote.calculated_amount is None:
            raise ValidationError({
                'amount': 'Student does not have a room assigned. '
                          'Please assign a room first or enter a manual amount.'
                if not quote.has_room else
                'Room type does not have a price set. Please enter a manual amount.'
            })
        amount = quote.calculated_amount

    if amount in (None, '') or Decimal(str(amount)) <= 0:
        raise ValidationError({'amount': 'Fee amount must be greater than 0'})

    fee = Fee.objects.create(
        student=student,
        hostel=hostel or student.hostel,
        fee_type=fee_type,
        amount=Decimal(str(amount)),
        due_date=due_date,
        payment_method=payment_method or '',
    )
    logger.info(f"Created {fee_type} fee {fee.receipt_number} of {fee.amount} for student {student.student_id}")
    return fee


def update_fee_status(fee, status, paid_date=None, payment_method=None):
    """
    Move a fee to ``status``. ``paid_date`` is only kept on paid fees and
    defaults to today. A paid fee stays paid.
    """
    if status not in Fee.FeeStatus.values:
        raise ValidationError({'status': f'Unknown fee status: {status}'})
    if fee.status == Fee.FeeStatus.PAID and status != Fee.FeeStatus.PAID:
        raise InvalidTransition(
            _('Fee %(receipt)s is already paid.') % {'receipt': fee.receipt_number}
        )

    fee.status = status
    if status == Fee.FeeStatus.PAID:
        fee.paid_date = paid_date or timezone.localdate()
    else:
        fee.paid_date = None
    if payment_method is not None:
        fee.payment_method = payment_method
    fee.save(update_fields=['status', 'paid_date', 'payment_method', 'updated_at'])

    logger.info(f"Fee {fee.receipt_number} marked {status}")
    return fee


def mark_fee_paid(fee, paid_date=None, payment_method=None):
    return update_fee_status(fee, Fee.FeeStatus.PAID, paid_date=paid_date, payment_method=payment_method)


def overdue_fees(queryset=None, today=None):
    """Unpaid fees whose due date has passed, oldest first."""
    today = today or timezone.localdate()
    queryset = Fee.objects.all() if queryset is None else queryset
    return queryset.filter(
        status__in=[Fee.FeeStatus.PENDING, Fee.FeeStatus.OVERDUE],
        due_date__lt=today,
    ).order_by('due_date')


def mark_overdue_fees(queryset=None, today=None):
    """
    Persist the overdue status of pending fees past their due date.
    Running it repeatedly is safe; returns the number of fees updated.
    """
    today = today or timezone.localdate()
    queryset = Fee.objects.all() if queryset is None else queryset
    updated = queryset.filter(
        status=Fee.FeeStatus.PENDING, due_date__lt=today
    ).update(status=Fee.FeeStatus.OVERDUE, updated_at=timezone.now())
    if updated:
        logger.info(f"Marked {updated} fees overdue")
    return updated


def fee_statistics(queryset=None, today=None):
    """Paid, pending and overdue totals overall and per fee type."""
    today = today or timezone.localdate()
    queryset = Fee.objects.all() if queryset is None else queryset

    paid = Q(status=Fee.FeeStatus.PAID)
    overdue = Q(status=Fee.FeeStatus.OVERDUE) | Q(status=Fee.FeeStatus.PENDING, due_date__lt=today)
    pending = Q(status=Fee.FeeStatus.PENDING, due_date__gte=today)

    totals = {
        'total_paid': Sum('amount', filter=paid, default=Decimal('0')),
        'total_pending': Sum('amount', filter=pending, default=Decimal('0')),
        'total_overdue': Sum('amount', filter=overdue, default=Decimal('0')),
    }
    overview = queryset.aggregate(total_records=Count('id'), **totals)
    by_type = list(
        queryset.order_by().values('fee_type').annotate(
            paid=totals['total_paid'],
            pending=totals['total_pending'],
            overdue=totals['total_overdue'],
        ).order_by('fee_type')
    )
    return {'overview': overview, 'by_type': by_type}
