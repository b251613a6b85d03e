# apps/hostels/tests.py

from datetime import date
from decimal import Decimal
from io import StringIO

from django.contrib.admin.sites import AdminSite
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import (
    AlreadyAssigned, CapacityExceeded, InvalidCapacity, InvalidTransition,
    ProtectedReference, RoomUnavailable,
)
from apps.students.models import Student
from apps.users.models import User

from .admin import RoomTypeAdmin
from .forms import RoomForm
from .models import Hostel, RoomType, Room, RoomTransfer
from . import services


def make_student(hostel, student_id, room=None, **extra):
    return Student.objects.create(
        student_id=student_id,
        first_name=extra.pop('first_name', 'Student'),
        last_name=extra.pop('last_name', str(student_id)),
        hostel=hostel,
        room=room,
        **extra
    )


def fill_room(room, hostel, count, first_id):
    """Allocate ``count`` fresh students to ``room``."""
    students = []
    for offset in range(count):
        student = make_student(hostel, first_id + offset)
        student, _room = services.allocate_room(student, room)
        students.append(student)
    room.refresh_from_db()
    return students


class HostelDataMixin:
    """Shared hostel, room types and rooms."""

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')
        self.other_hostel = Hostel.objects.create(name='South Hall', code='SH')
        self.quad = RoomType.objects.create(name='Quad', capacity=4, price_per_month=Decimal('3000.00'))
        self.single = RoomType.objects.create(name='Single', capacity=1, price_per_month=Decimal('5000.00'))
        self.room_a = Room.objects.create(hostel=self.hostel, room_number='101', room_type=self.quad, capacity=4)
        self.room_b = Room.objects.create(hostel=self.hostel, room_number='102', room_type=self.quad, capacity=4)
        self.far_room = Room.objects.create(
            hostel=self.other_hostel, room_number='101', room_type=self.quad, capacity=4
        )


class RoomCapacityLedgerTestCase(HostelDataMixin, TestCase):
    """Room status, eligibility and capacity validation"""

    def test_status_follows_occupancy(self):
        room = self.room_a
        expected = {
            0: Room.RoomStatus.AVAILABLE,
            1: Room.RoomStatus.PARTIALLY_OCCUPIED,
            3: Room.RoomStatus.PARTIALLY_OCCUPIED,
            4: Room.RoomStatus.OCCUPIED,
        }
        for occupancy, room_status in expected.items():
            room.occupancy_count = occupancy
            self.assertEqual(room.status, room_status)

    def test_maintenance_overrides_occupancy(self):
        room = self.room_a
        room.is_under_maintenance = True
        for occupancy in (0, 2, 4):
            room.occupancy_count = occupancy
            self.assertEqual(room.status, Room.RoomStatus.MAINTENANCE)
            self.assertFalse(room.is_eligible)

    def test_capacity_remaining(self):
        fill_room(self.room_a, self.hostel, 3, 1)
        self.assertEqual(services.capacity_remaining(self.room_a), 1)
        self.assertEqual(self.room_a.capacity_remaining, 1)
        self.assertTrue(self.room_a.is_eligible)

    def test_capacity_above_room_type_is_rejected(self):
        with self.assertRaises(InvalidCapacity):
            services.save_room(Room(hostel=self.hostel, room_number='103', room_type=self.quad, capacity=5))
        self.assertFalse(Room.objects.filter(room_number='103').exists())

    def test_capacity_below_occupancy_is_rejected(self):
        fill_room(self.room_a, self.hostel, 3, 1)
        with self.assertRaises(InvalidCapacity):
            services.save_room(self.room_a, capacity=2)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.capacity, 4)

    def test_capacity_must_be_positive(self):
        with self.assertRaises(InvalidCapacity):
            services.validate_capacity(self.quad, 0)

    def test_save_room_keeps_occupancy(self):
        fill_room(self.room_a, self.hostel, 2, 1)
        stale = Room.objects.get(pk=self.room_a.pk)
        stale.occupancy_count = 0
        room = services.save_room(stale, capacity=3)
        self.assertEqual(room.occupancy_count, 2)
        self.assertEqual(room.capacity, 3)

    def test_duplicate_room_number_is_rejected(self):
        with self.assertRaises(ValidationError):
            services.save_room(Room(hostel=self.hostel, room_number='101', room_type=self.quad, capacity=2))

    def test_same_room_number_in_another_hostel_is_allowed(self):
        room = services.save_room(
            Room(hostel=self.other_hostel, room_number='102', room_type=self.quad, capacity=2)
        )
        self.assertEqual(room.room_number, '102')

    def test_database_rejects_occupancy_above_capacity(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Room.objects.filter(pk=self.room_a.pk).update(occupancy_count=5)

    def test_room_type_cannot_shrink_below_rooms(self):
        with self.assertRaises(InvalidCapacity):
            services.save_room_type(self.quad, capacity=2)
        self.quad.refresh_from_db()
        self.assertEqual(self.quad.capacity, 4)

    def test_recount_occupancy(self):
        make_student(self.hostel, 50, room=self.room_a)
        make_student(self.hostel, 51, room=self.room_a)
        room = services.recount_occupancy(self.room_a)
        self.assertEqual(room.occupancy_count, 2)

    def test_hostel_occupancy_totals(self):
        fill_room(self.room_a, self.hostel, 2, 1)
        self.assertEqual(self.hostel.total_capacity, 8)
        self.assertEqual(self.hostel.current_occupancy, 2)
        self.assertEqual(self.hostel.occupancy_percentage, 25.0)


class RoomFormTestCase(HostelDataMixin, TestCase):
    """Admin room form"""

    def form_data(self, **overrides):
        data = {
            'hostel': self.hostel.pk,
            'room_number': '201',
            'room_type': self.quad.pk,
            'floor': 2,
            'capacity': 4,
            'is_under_maintenance': False,
            'amenities': '',
        }
        data.update(overrides)
        return data

    def test_valid_form(self):
        form = RoomForm(data=self.form_data())
        self.assertTrue(form.is_valid(), form.errors)

    def test_capacity_above_room_type(self):
        form = RoomForm(data=self.form_data(capacity=6))
        self.assertFalse(form.is_valid())
        self.assertIn('capacity', form.errors)

    def test_duplicate_room_number(self):
        form = RoomForm(data=self.form_data(room_number='101'))
        self.assertFalse(form.is_valid())
        self.assertIn('room_number', form.errors)


class RoomTypeAdminTestCase(HostelDataMixin, TestCase):
    """Room type admin saves through the capacity checks"""

    def setUp(self):
        super().setUp()
        self.model_admin = RoomTypeAdmin(RoomType, AdminSite())

    def test_shrink_below_room_is_rejected(self):
        self.quad.capacity = 2
        with self.assertRaises(InvalidCapacity):
            self.model_admin.save_model(None, self.quad, None, True)
        self.quad.refresh_from_db()
        self.assertEqual(self.quad.capacity, 4)

    def test_change_is_saved(self):
        self.quad.price_per_month = Decimal('3500.00')
        self.model_admin.save_model(None, self.quad, None, True)
        self.quad.refresh_from_db()
        self.assertEqual(self.quad.price_per_month, Decimal('3500.00'))


class AllocationTestCase(HostelDataMixin, TestCase):
    """Room allocation and release"""

    def test_allocation_increments_by_one(self):
        student = make_student(self.hostel, 1)
        student, room = services.allocate_room(student, self.room_a)
        self.assertEqual(room.occupancy_count, 1)
        self.assertEqual(student.room_id, self.room_a.pk)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)

    def test_repeat_allocation_is_rejected(self):
        student = make_student(self.hostel, 1)
        services.allocate_room(student, self.room_a)
        with self.assertRaises(AlreadyAssigned):
            services.allocate_room(student, self.room_a)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)

    def test_student_with_a_room_cannot_be_allocated_again(self):
        student = make_student(self.hostel, 1)
        services.allocate_room(student, self.room_a)
        with self.assertRaises(AlreadyAssigned):
            services.allocate_room(student, self.room_b)
        self.room_b.refresh_from_db()
        self.assertEqual(self.room_b.occupancy_count, 0)
        student.refresh_from_db()
        self.assertEqual(student.room_id, self.room_a.pk)

    def test_full_room_is_rejected(self):
        fill_room(self.room_a, self.hostel, 4, 1)
        student = make_student(self.hostel, 10)
        with self.assertRaises(CapacityExceeded):
            services.allocate_room(student, self.room_a)
        student.refresh_from_db()
        self.assertIsNone(student.room_id)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 4)

    def test_room_under_maintenance_is_rejected(self):
        self.room_a.is_under_maintenance = True
        self.room_a.save()
        student = make_student(self.hostel, 1)
        with self.assertRaises(RoomUnavailable):
            services.allocate_room(student, self.room_a)

    def test_room_of_another_hostel_is_rejected(self):
        student = make_student(self.hostel, 1)
        with self.assertRaises(RoomUnavailable):
            services.allocate_room(student, self.far_room)
        self.far_room.refresh_from_db()
        self.assertEqual(self.far_room.occupancy_count, 0)

    def test_release_room(self):
        student = make_student(self.hostel, 1)
        services.allocate_room(student, self.room_a)
        student = services.release_room(student)
        self.assertIsNone(student.room_id)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)

    def test_release_without_room_is_noop(self):
        student = make_student(self.hostel, 1)
        student = services.release_room(student)
        self.assertIsNone(student.room_id)


class RoomTransferTestCase(HostelDataMixin, TestCase):
    """Transfer requests and their decisions"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)

    def test_request_defaults_to_current_room(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b, reason='Quieter room')
        self.assertEqual(transfer.from_room, self.room_a)
        self.assertEqual(transfer.status, RoomTransfer.TransferStatus.PENDING)
        self.assertEqual(transfer.hostel, self.hostel)

    def test_request_to_same_room_is_rejected(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        with self.assertRaises(AlreadyAssigned):
            services.request_transfer(student, self.room_a)

    def test_request_to_full_room_is_rejected(self):
        fill_room(self.room_b, self.hostel, 4, 10)
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        with self.assertRaises(CapacityExceeded):
            services.request_transfer(student, self.room_b)
        self.assertFalse(RoomTransfer.objects.exists())

    def test_request_checks_stored_occupancy(self):
        stale_room = Room.objects.get(pk=self.room_b.pk)
        fill_room(self.room_b, self.hostel, 4, 10)
        self.assertEqual(stale_room.occupancy_count, 0)

        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        with self.assertRaises(CapacityExceeded):
            services.request_transfer(student, stale_room)
        self.assertFalse(RoomTransfer.objects.exists())

    def test_request_uses_stored_current_room(self):
        student = make_student(self.hostel, 1)
        stale_student = Student.objects.get(pk=student.pk)
        services.allocate_room(student, self.room_a)
        self.assertIsNone(stale_student.room_id)

        transfer = services.request_transfer(stale_student, self.room_b)
        self.assertEqual(transfer.from_room, self.room_a)

    def test_request_to_other_hostel_is_rejected(self):
        student = make_student(self.hostel, 1)
        with self.assertRaises(RoomUnavailable):
            services.request_transfer(student, self.far_room)

    def test_approval_moves_student(self):
        fill_room(self.room_a, self.hostel, 2, 10)
        fill_room(self.room_b, self.hostel, 2, 20)
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)

        transfer = services.approve_transfer(transfer, decided_by=self.admin)

        self.room_a.refresh_from_db()
        self.room_b.refresh_from_db()
        student.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 2)
        self.assertEqual(self.room_b.occupancy_count, 3)
        self.assertEqual(student.room_id, self.room_b.pk)
        self.assertEqual(transfer.status, RoomTransfer.TransferStatus.APPROVED)
        self.assertEqual(transfer.transfer_date, timezone.localdate())
        self.assertEqual(transfer.decided_by, self.admin)
        self.assertIsNotNone(transfer.decided_at)

    def test_approval_with_explicit_date(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        transfer = services.approve_transfer(transfer, transfer_date=date(2026, 1, 15), admin_notes='ok')
        self.assertEqual(transfer.transfer_date, date(2026, 1, 15))
        self.assertEqual(transfer.admin_notes, 'ok')

    def test_approval_into_room_that_filled_up(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        fill_room(self.room_b, self.hostel, 4, 10)

        with self.assertRaises(CapacityExceeded):
            services.approve_transfer(transfer, decided_by=self.admin)

        transfer.refresh_from_db()
        student.refresh_from_db()
        self.room_a.refresh_from_db()
        self.room_b.refresh_from_db()
        self.assertEqual(transfer.status, RoomTransfer.TransferStatus.PENDING)
        self.assertIsNone(transfer.transfer_date)
        self.assertEqual(student.room_id, self.room_a.pk)
        self.assertEqual(self.room_a.occupancy_count, 1)
        self.assertEqual(self.room_b.occupancy_count, 4)

    def test_approval_into_room_under_maintenance(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        Room.objects.filter(pk=self.room_b.pk).update(is_under_maintenance=True)

        with self.assertRaises(RoomUnavailable):
            services.approve_transfer(transfer)
        transfer.refresh_from_db()
        self.assertTrue(transfer.is_pending)

    def test_approval_uses_current_room(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        # Student moved out through another path before the decision
        services.release_room(student)

        services.approve_transfer(transfer)

        self.room_a.refresh_from_db()
        self.room_b.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)
        self.assertEqual(self.room_b.occupancy_count, 1)

    def test_rejection_has_no_side_effects(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)

        transfer = services.reject_transfer(transfer, decided_by=self.admin, admin_notes='No')

        student.refresh_from_db()
        self.room_b.refresh_from_db()
        self.assertEqual(transfer.status, RoomTransfer.TransferStatus.REJECTED)
        self.assertEqual(student.room_id, self.room_a.pk)
        self.assertEqual(self.room_b.occupancy_count, 0)
        self.assertIsNone(transfer.transfer_date)

    def test_decided_requests_are_terminal(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        services.reject_transfer(transfer)

        with self.assertRaises(InvalidTransition):
            services.approve_transfer(transfer)
        with self.assertRaises(InvalidTransition):
            services.reject_transfer(transfer)


class DeletePolicyTestCase(HostelDataMixin, TestCase):
    """Rooms and room types still in use cannot be deleted"""

    def test_occupied_room_cannot_be_deleted(self):
        fill_room(self.room_a, self.hostel, 1, 1)
        with self.assertRaises(ProtectedReference):
            services.delete_room(self.room_a)
        self.assertTrue(Room.objects.filter(pk=self.room_a.pk).exists())

    def test_room_with_pending_transfer_cannot_be_deleted(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        services.request_transfer(student, self.room_b)
        with self.assertRaises(ProtectedReference):
            services.delete_room(self.room_b)

    def test_empty_room_can_be_deleted(self):
        services.delete_room(self.room_b)
        self.assertFalse(Room.objects.filter(pk=self.room_b.pk).exists())

    def test_room_type_in_use_cannot_be_deleted(self):
        with self.assertRaises(ProtectedReference):
            services.delete_room_type(self.quad)
        services.delete_room_type(self.single)
        self.assertFalse(RoomType.objects.filter(pk=self.single.pk).exists())


class RoomAPITestCase(HostelDataMixin, APITestCase):
    """Room, room type, allocation and transfer endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user(
            'admin@example.com', 'testpass123', role=User.Role.ADMIN, hostel=self.hostel
        )
        self.super_admin = User.objects.create_superuser('root@example.com', 'testpass123')
        self.client.force_authenticate(self.admin)

    def test_authentication_required(self):
        self.client.force_authenticate(None)
        response = self.client.get(reverse('hostels:room-list'))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_admin_without_hostel_is_forbidden(self):
        admin = User.objects.create_user('stray@example.com', 'testpass123', role=User.Role.ADMIN)
        self.client.force_authenticate(admin)
        response = self.client.get(reverse('hostels:room-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_room_list_is_scoped_to_hostel(self):
        response = self.client.get(reverse('hostels:room-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = {str(room['id']) for room in response.data}
        self.assertEqual(ids, {str(self.room_a.pk), str(self.room_b.pk)})

    def test_super_admin_sees_every_hostel_or_picks_one(self):
        self.client.force_authenticate(self.super_admin)
        response = self.client.get(reverse('hostels:room-list'))
        self.assertEqual(len(response.data), 3)
        response = self.client.get(reverse('hostels:room-list'), {'hostel_id': str(self.other_hostel.pk)})
        self.assertEqual([str(room['id']) for room in response.data], [str(self.far_room.pk)])

    def test_room_detail_of_other_hostel_is_hidden(self):
        response = self.client.get(reverse('hostels:room-detail', args=[self.far_room.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_room_status_filter(self):
        fill_room(self.room_a, self.hostel, 4, 1)
        response = self.client.get(reverse('hostels:room-list'), {'status': 'occupied'})
        self.assertEqual([room['room_number'] for room in response.data], ['101'])
        self.assertEqual(response.data[0]['status'], 'occupied')
        self.assertEqual(response.data[0]['capacity_remaining'], 0)

    def test_create_room(self):
        response = self.client.post(reverse('hostels:room-list'), {
            'room_number': '201',
            'room_type': str(self.quad.pk),
            'floor': 2,
            'capacity': 3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        room = Room.objects.get(hostel=self.hostel, room_number='201')
        self.assertEqual(room.occupancy_count, 0)
        self.assertEqual(response.data['status'], 'available')

    def test_create_room_above_type_capacity(self):
        response = self.client.post(reverse('hostels:room-list'), {
            'room_number': '202',
            'room_type': str(self.single.pk),
            'capacity': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_capacity')

    def test_occupancy_is_read_only(self):
        response = self.client.patch(
            reverse('hostels:room-detail', args=[self.room_a.pk]),
            {'occupancy_count': 3}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)

    def test_delete_occupied_room(self):
        fill_room(self.room_a, self.hostel, 1, 1)
        response = self.client.delete(reverse('hostels:room-detail', args=[self.room_a.pk]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'protected_reference')

    def test_available_rooms(self):
        fill_room(self.room_a, self.hostel, 4, 1)
        response = self.client.get(reverse('hostels:room-available'))
        self.assertEqual([room['room_number'] for room in response.data], ['102'])

    def test_room_types(self):
        response = self.client.get(reverse('hostels:roomtype-all-types'))
        self.assertEqual([room_type['name'] for room_type in response.data], ['Single', 'Quad'])

        response = self.client.post(reverse('hostels:roomtype-all-types'), {
            'name': 'Double', 'capacity': 2, 'price_per_month': '4000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(RoomType.objects.filter(name='Double').exists())

    def test_allocate(self):
        student = make_student(self.hostel, 1)
        response = self.client.post(reverse('hostels:room-allocate'), {
            'student_id': str(student.pk), 'room_id': str(self.room_a.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['room']['occupancy_count'], 1)
        self.assertEqual(response.data['room']['status'], 'partially_occupied')

        response = self.client.post(reverse('hostels:room-allocate'), {
            'student_id': str(student.pk), 'room_id': str(self.room_a.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'already_assigned')
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)

    def test_allocate_to_full_room(self):
        fill_room(self.room_a, self.hostel, 4, 10)
        student = make_student(self.hostel, 1)
        response = self.client.post(reverse('hostels:room-allocate'), {
            'student_id': str(student.pk), 'room_id': str(self.room_a.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'capacity_exceeded')

    def test_allocate_unknown_student(self):
        response = self.client.post(reverse('hostels:room-allocate'), {
            'student_id': '00000000-0000-0000-0000-000000000000', 'room_id': str(self.room_a.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'not_found')

    def test_allocate_in_other_hostel_is_forbidden(self):
        student = make_student(self.other_hostel, 1)
        response = self.client.post(reverse('hostels:room-allocate'), {
            'student_id': str(student.pk), 'room_id': str(self.far_room.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_transfer_flow(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)

        response = self.client.post(reverse('hostels:roomtransfer-list'), {
            'student': str(student.pk), 'to_room': str(self.room_b.pk), 'reason': 'Closer to friends'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['from_room_number'], '101')
        transfer_id = response.data['id']

        response = self.client.patch(
            reverse('hostels:roomtransfer-detail', args=[transfer_id]),
            {'status': 'approved'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertEqual(response.data['decided_by_name'], 'admin@example.com')
        student.refresh_from_db()
        self.assertEqual(student.room_id, self.room_b.pk)

        response = self.client.patch(
            reverse('hostels:roomtransfer-detail', args=[transfer_id]),
            {'status': 'rejected'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_transition')

        response = self.client.delete(reverse('hostels:roomtransfer-detail', args=[transfer_id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        student.refresh_from_db()
        self.assertEqual(student.room_id, self.room_b.pk)

    def test_failed_approval_is_rolled_back(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        transfer = services.request_transfer(student, self.room_b)
        fill_room(self.room_b, self.hostel, 4, 10)

        response = self.client.put(
            reverse('hostels:roomtransfer-detail', args=[transfer.pk]),
            {'status': 'approved'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'capacity_exceeded')
        transfer.refresh_from_db()
        self.assertTrue(transfer.is_pending)

    def test_transfer_status_filter(self):
        student = make_student(self.hostel, 1)
        student, _room = services.allocate_room(student, self.room_a)
        services.request_transfer(student, self.room_b)
        response = self.client.get(reverse('hostels:roomtransfer-list'), {'status': 'approved'})
        self.assertEqual(response.data, [])
        response = self.client.get(reverse('hostels:roomtransfer-list'), {'status': 'pending'})
        self.assertEqual(len(response.data), 1)


class HostelAPITestCase(HostelDataMixin, APITestCase):
    """Hostel endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)
        self.super_admin = User.objects.create_superuser('root@example.com', 'testpass123')

    def test_admin_sees_own_hostel_only(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('hostels:hostel-list'))
        self.assertEqual([hostel['code'] for hostel in response.data], ['NH'])
        self.assertEqual(response.data[0]['total_capacity'], 8)

    def test_only_super_admin_creates_hostels(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('hostels:hostel-list'), {'name': 'East', 'code': 'EH'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.super_admin)
        response = self.client.post(reverse('hostels:hostel-list'), {'name': 'East', 'code': 'EH'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


class CommandsTestCase(TestCase):
    """Hostel management commands"""

    def test_seed_hostel(self):
        out = StringIO()
        call_command('seed_hostel', 'Demo Hall', 'demo', '--floors', '2', '--rooms_per_floor', '3',
                     '--admin_email', 'warden@example.com', stdout=out)
        hostel = Hostel.objects.get(code='DEMO')
        self.assertEqual(hostel.rooms.count(), 6)
        self.assertEqual(hostel.total_capacity, 12)
        self.assertTrue(User.objects.filter(email='warden@example.com', hostel=hostel).exists())
        self.assertIn('Demo Hall', out.getvalue())

        with self.assertRaises(CommandError):
            call_command('seed_hostel', 'Demo Hall', 'DEMO', stdout=StringIO())

    def test_recount_occupancy(self):
        hostel = Hostel.objects.create(name='North Hall', code='NH')
        room_type = RoomType.objects.create(name='Double', capacity=2)
        room = Room.objects.create(hostel=hostel, room_number='1', room_type=room_type, capacity=2)
        make_student(hostel, 1, room=room)

        out = StringIO()
        call_command('recount_occupancy', '--hostel', 'nh', stdout=out)
        room.refresh_from_db()
        self.assertEqual(room.occupancy_count, 1)
        self.assertIn('1 rooms corrected', out.getvalue())
