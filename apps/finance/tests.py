# apps/finance/tests.py

import re
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import InvalidTransition
from apps.hostels.models import Hostel, RoomType, Room
from apps.hostels import services as room_services
from apps.students.models import Student
from apps.users.models import User

from .models import Fee, generate_receipt_number
from . import services


class FeeDataMixin:

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')
        self.single = RoomType.objects.create(name='Single', capacity=1, price_per_month=Decimal('5000.00'))
        self.unpriced = RoomType.objects.create(name='Dorm', capacity=6)
        self.room = Room.objects.create(hostel=self.hostel, room_number='101', room_type=self.single, capacity=1)
        self.dorm = Room.objects.create(hostel=self.hostel, room_number='D1', room_type=self.unpriced, capacity=6)

        self.student = Student.objects.create(student_id=1, first_name='Ada', last_name='Obi', hostel=self.hostel)
        self.student, _room = room_services.allocate_room(self.student, self.room)
        self.roomless = Student.objects.create(student_id=2, first_name='Bola', last_name='Ade', hostel=self.hostel)

        self.today = timezone.localdate()

    def fee(self, student=None, fee_type=Fee.FeeType.HOSTEL, amount='100.00', due_in=7, **extra):
        return Fee.objects.create(
            student=student or self.student,
            hostel=self.hostel,
            fee_type=fee_type,
            amount=Decimal(amount),
            due_date=self.today + timedelta(days=due_in),
            **extra
        )


class FeeCalculatorTestCase(FeeDataMixin, TestCase):
    """Room-type fee calculation"""

    def test_price_from_room_type(self):
        quote = services.calculate_hostel_fee(self.student)
        self.assertTrue(quote.has_room)
        self.assertEqual(quote.calculated_amount, Decimal('5000.00'))
        data = quote.as_dict()
        self.assertEqual(data['room_number'], '101')
        self.assertEqual(data['room_type'], 'Single')
        self.assertEqual(data['room_type_id'], self.single.pk)

    def test_student_without_room(self):
        quote = services.calculate_hostel_fee(self.roomless)
        self.assertFalse(quote.has_room)
        self.assertIsNone(quote.calculated_amount)
        self.assertNotIn('room_id', quote.as_dict())

    def test_room_type_without_price(self):
        self.roomless, _room = room_services.allocate_room(self.roomless, self.dorm)
        quote = services.calculate_hostel_fee(self.roomless)
        self.assertTrue(quote.has_room)
        self.assertIsNone(quote.calculated_amount)
        self.assertIn('price', quote.message)


class FeeDraftTestCase(FeeDataMixin, TestCase):
    """Fee type selector behaviour"""

    def test_hostel_fee_is_proposed(self):
        draft = services.FeeDraft(self.student)
        self.assertEqual(draft.amount, Decimal('5000.00'))

    def test_switching_fee_type_clears_and_restores(self):
        draft = services.FeeDraft(self.student)
        draft.select_fee_type(Fee.FeeType.MESS)
        self.assertIsNone(draft.amount)
        draft.select_fee_type(Fee.FeeType.HOSTEL)
        self.assertEqual(draft.amount, Decimal('5000.00'))

    def test_manual_amount_wins(self):
        draft = services.FeeDraft(self.student, due_date=self.today)
        draft.enter_amount('4500')
        self.assertEqual(draft.amount, Decimal('4500'))
        fee = draft.submit()
        fee.refresh_from_db()
        self.assertEqual(fee.amount, Decimal('4500.00'))

    def test_submit_other_fee_type(self):
        draft = services.FeeDraft(self.student, due_date=self.today)
        draft.select_fee_type(Fee.FeeType.FINE)
        draft.enter_amount(Decimal('250'))
        fee = draft.submit(payment_method=Fee.PaymentMethod.CASH)
        self.assertEqual(fee.fee_type, Fee.FeeType.FINE)
        self.assertEqual(fee.amount, Decimal('250'))


class FeeServicesTestCase(FeeDataMixin, TestCase):
    """Fee creation, payment and overdue handling"""

    def test_hostel_fee_without_amount_uses_room_price(self):
        fee = services.create_fee(self.student, Fee.FeeType.HOSTEL, due_date=self.today)
        self.assertEqual(fee.amount, Decimal('5000.00'))
        self.assertEqual(fee.status, Fee.FeeStatus.PENDING)
        self.assertEqual(fee.hostel, self.hostel)

    def test_override_amount_is_stored(self):
        fee = services.create_fee(self.student, Fee.FeeType.HOSTEL, amount=Decimal('4500'), due_date=self.today)
        fee.refresh_from_db()
        self.assertEqual(fee.amount, Decimal('4500.00'))

    def test_hostel_fee_without_room_or_amount(self):
        with self.assertRaises(ValidationError):
            services.create_fee(self.roomless, Fee.FeeType.HOSTEL, due_date=self.today)
        self.assertFalse(Fee.objects.exists())

    def test_non_hostel_fee_requires_amount(self):
        with self.assertRaises(ValidationError):
            services.create_fee(self.student, Fee.FeeType.MESS, due_date=self.today)

    def test_amount_must_be_positive(self):
        with self.assertRaises(ValidationError):
            services.create_fee(self.student, Fee.FeeType.MESS, amount='0', due_date=self.today)

    def test_due_date_required(self):
        with self.assertRaises(ValidationError):
            services.create_fee(self.student, Fee.FeeType.MESS, amount='10')

    def test_mark_paid(self):
        fee = self.fee()
        fee = services.mark_fee_paid(fee, payment_method=Fee.PaymentMethod.CARD)
        self.assertEqual(fee.status, Fee.FeeStatus.PAID)
        self.assertEqual(fee.paid_date, self.today)
        self.assertEqual(fee.payment_method, Fee.PaymentMethod.CARD)

    def test_paid_fee_stays_paid(self):
        fee = services.mark_fee_paid(self.fee())
        with self.assertRaises(InvalidTransition):
            services.update_fee_status(fee, Fee.FeeStatus.PENDING)
        fee.refresh_from_db()
        self.assertEqual(fee.status, Fee.FeeStatus.PAID)
        self.assertEqual(fee.paid_date, self.today)

    def test_overdue_fee_can_be_paid(self):
        fee = self.fee(due_in=-3)
        services.mark_overdue_fees()
        fee.refresh_from_db()
        fee = services.mark_fee_paid(fee)
        self.assertEqual(fee.status, Fee.FeeStatus.PAID)

    def test_effective_status(self):
        late = self.fee(due_in=-1)
        on_time = self.fee(due_in=1)
        paid_late = self.fee(due_in=-1, status=Fee.FeeStatus.PAID)
        self.assertEqual(late.effective_status, Fee.FeeStatus.OVERDUE)
        self.assertEqual(on_time.effective_status, Fee.FeeStatus.PENDING)
        self.assertEqual(paid_late.effective_status, Fee.FeeStatus.PAID)

    def test_mark_overdue_is_idempotent(self):
        self.fee(due_in=-2)
        self.fee(due_in=3)
        self.assertEqual(services.mark_overdue_fees(), 1)
        self.assertEqual(services.mark_overdue_fees(), 0)
        self.assertEqual(Fee.objects.filter(status=Fee.FeeStatus.OVERDUE).count(), 1)

    def test_statistics(self):
        self.fee(amount='100.00', due_in=5)
        self.fee(amount='40.00', due_in=-5)
        self.fee(fee_type=Fee.FeeType.MESS, amount='25.00', status=Fee.FeeStatus.PAID)

        stats = services.fee_statistics()
        overview = stats['overview']
        self.assertEqual(overview['total_records'], 3)
        self.assertEqual(overview['total_pending'], Decimal('100.00'))
        self.assertEqual(overview['total_overdue'], Decimal('40.00'))
        self.assertEqual(overview['total_paid'], Decimal('25.00'))

        by_type = {row['fee_type']: row for row in stats['by_type']}
        self.assertEqual(by_type['mess']['paid'], Decimal('25.00'))
        self.assertEqual(by_type['hostel']['pending'], Decimal('100.00'))

    @override_settings(HOSTEL_RECEIPT_PREFIX='HST')
    def test_receipt_numbers(self):
        number = generate_receipt_number()
        self.assertRegex(number, r'^HST-\d{14}-[A-Z0-9]{9}$')
        self.assertNotEqual(self.fee().receipt_number, self.fee().receipt_number)


class FeeAPITestCase(FeeDataMixin, APITestCase):
    """Fee endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)
        self.client.force_authenticate(self.admin)

    def test_calculate(self):
        response = self.client.get(reverse('finance:fee-calculate', args=[self.student.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_room'])
        self.assertEqual(response.data['calculated_amount'], Decimal('5000.00'))

        response = self.client.get(reverse('finance:fee-calculate', args=[self.roomless.pk]))
        self.assertFalse(response.data['has_room'])
        self.assertIsNone(response.data['calculated_amount'])

    def test_calculate_for_other_hostel(self):
        other = Hostel.objects.create(name='South Hall', code='SH')
        stranger = Student.objects.create(student_id=9, first_name='X', last_name='Y', hostel=other)
        response = self.client.get(reverse('finance:fee-calculate', args=[stranger.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_with_override(self):
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.student.pk),
            'fee_type': 'hostel',
            'amount': '4500.00',
            'due_date': self.today.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['amount'], '4500.00')
        self.assertEqual(Fee.objects.get().amount, Decimal('4500.00'))

    def test_create_without_amount(self):
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.student.pk),
            'due_date': self.today.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['amount'], '5000.00')
        self.assertTrue(re.match(r'^REC-', response.data['receipt_number']))

    def test_create_without_room_or_amount(self):
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.roomless.pk),
            'fee_type': 'hostel',
            'due_date': self.today.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data['error'])

    def test_mark_paid(self):
        fee = self.fee()
        response = self.client.patch(reverse('finance:fee-detail', args=[fee.pk]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(response.data['paid_date'], self.today.isoformat())

    def test_paid_fee_cannot_be_reopened(self):
        fee = self.fee(status=Fee.FeeStatus.PAID, paid_date=self.today)
        response = self.client.patch(
            reverse('finance:fee-detail', args=[fee.pk]), {'status': 'pending'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_transition')
        fee.refresh_from_db()
        self.assertEqual(fee.status, Fee.FeeStatus.PAID)

    def test_status_filters(self):
        self.fee(due_in=5)
        late = self.fee(due_in=-5)
        self.fee(status=Fee.FeeStatus.PAID, paid_date=date(2026, 1, 1))

        response = self.client.get(reverse('finance:fee-list'), {'status': 'overdue'})
        self.assertEqual([str(fee['id']) for fee in response.data], [str(late.pk)])
        self.assertEqual(response.data[0]['effective_status'], 'overdue')

        response = self.client.get(reverse('finance:fee-list'), {'status': 'pending'})
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('finance:fee-overdue'))
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('finance:fee-receipts'))
        self.assertEqual(len(response.data), 1)

    def test_stats(self):
        self.fee(amount='10.00')
        response = self.client.get(reverse('finance:fee-stats'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['overview']['total_records'], 1)

    def test_fees_are_scoped(self):
        other = Hostel.objects.create(name='South Hall', code='SH')
        stranger = Student.objects.create(student_id=9, first_name='X', last_name='Y', hostel=other)
        Fee.objects.create(student=stranger, hostel=other, amount=Decimal('1.00'), due_date=self.today)
        self.fee()
        response = self.client.get(reverse('finance:fee-list'))
        self.assertEqual(len(response.data), 1)


class MarkOverdueCommandTestCase(FeeDataMixin, TestCase):

    def test_command(self):
        self.fee(due_in=-1)
        out = StringIO()
        call_command('mark_overdue_fees', stdout=out)
        self.assertIn('1 fees marked as overdue', out.getvalue())
        self.assertEqual(Fee.objects.get().status, Fee.FeeStatus.OVERDUE)
