# apps/students/tests.py

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import CapacityExceeded, ProtectedReference
from apps.finance.models import Fee
from apps.hostels.models import Hostel, RoomType, Room, RoomTransfer
from apps.hostels import services as room_services
from apps.users.models import User

from .models import Student
from . import services


class StudentDataMixin:

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')
        self.other_hostel = Hostel.objects.create(name='South Hall', code='SH')
        self.double = RoomType.objects.create(name='Double', capacity=2, price_per_month=Decimal('3500.00'))
        self.room_a = Room.objects.create(hostel=self.hostel, room_number='101', room_type=self.double, capacity=2)
        self.room_b = Room.objects.create(hostel=self.hostel, room_number='102', room_type=self.double, capacity=2)
        self.far_room = Room.objects.create(
            hostel=self.other_hostel, room_number='201', room_type=self.double, capacity=2
        )

    def register(self, student_id, room=None, hostel=None, **extra):
        return services.register_student(
            room=room,
            student_id=student_id,
            first_name=extra.pop('first_name', 'Ada'),
            last_name=extra.pop('last_name', 'Obi'),
            hostel=hostel or self.hostel,
            **extra
        )


class StudentServicesTestCase(StudentDataMixin, TestCase):
    """Student registration, status changes and deletion"""

    def test_register_with_room(self):
        student = self.register(1, room=self.room_a)
        self.assertEqual(student.room_id, self.room_a.pk)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)
        self.assertTrue(student.has_room)

    def test_register_into_full_room_creates_nothing(self):
        self.register(1, room=self.room_a)
        self.register(2, room=self.room_a)
        with self.assertRaises(CapacityExceeded):
            self.register(3, room=self.room_a)
        self.assertFalse(Student.objects.filter(student_id=3).exists())

    def test_deactivation_releases_room(self):
        student = self.register(1, room=self.room_a)
        student = services.set_student_status(student, Student.StudentStatus.INACTIVE)
        self.assertEqual(student.status, Student.StudentStatus.INACTIVE)
        self.assertIsNone(student.room_id)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)

    def test_delete_releases_room(self):
        student = self.register(1, room=self.room_a)
        services.delete_student(student)
        self.assertFalse(Student.objects.filter(student_id=1).exists())
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)

    def test_delete_with_unpaid_fees_is_rejected(self):
        student = self.register(1, room=self.room_a)
        Fee.objects.create(
            student=student, hostel=self.hostel, fee_type=Fee.FeeType.MESS,
            amount=Decimal('500.00'), due_date=timezone.localdate()
        )
        with self.assertRaises(ProtectedReference):
            services.delete_student(student)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)

    def test_delete_with_pending_transfer_is_rejected(self):
        student = self.register(1, room=self.room_a)
        room_services.request_transfer(student, self.room_b)
        with self.assertRaises(ProtectedReference):
            services.delete_student(student)

    def test_delete_with_paid_fees(self):
        student = self.register(1)
        Fee.objects.create(
            student=student, hostel=self.hostel, fee_type=Fee.FeeType.MESS,
            amount=Decimal('500.00'), due_date=timezone.localdate(), status=Fee.FeeStatus.PAID
        )
        services.delete_student(student)
        self.assertFalse(Fee.objects.exists())


class StudentAPITestCase(StudentDataMixin, APITestCase):
    """Student endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)
        self.client.force_authenticate(self.admin)

    def test_create_student_with_room(self):
        response = self.client.post(reverse('students:student-list'), {
            'student_id': 1001,
            'first_name': 'Ada',
            'last_name': 'Obi',
            'email': 'ada@example.com',
            'room_id': str(self.room_a.pk),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['room_number'], '101')
        self.assertEqual(response.data['room_type'], 'Double')
        student = Student.objects.get(student_id=1001)
        self.assertEqual(student.hostel, self.hostel)
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 1)

    def test_create_student_in_room_of_other_hostel(self):
        response = self.client.post(reverse('students:student-list'), {
            'student_id': 1002, 'first_name': 'Ada', 'last_name': 'Obi', 'room_id': str(self.far_room.pk),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Student.objects.filter(student_id=1002).exists())

    def test_student_id_must_be_positive(self):
        response = self.client.post(reverse('students:student-list'), {
            'student_id': 0, 'first_name': 'Ada', 'last_name': 'Obi',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_scoped_and_searchable(self):
        self.register(1, first_name='Ada')
        self.register(2, first_name='Bola')
        self.register(3, first_name='Chidi', hostel=self.other_hostel)

        response = self.client.get(reverse('students:student-list'))
        self.assertEqual({s['student_id'] for s in response.data}, {1, 2})

        response = self.client.get(reverse('students:student-list'), {'search': 'bol'})
        self.assertEqual([s['student_id'] for s in response.data], [2])

        response = self.client.get(reverse('students:student-list'), {'search': '1'})
        self.assertEqual([s['student_id'] for s in response.data], [1])

    def test_room_cannot_change_through_update(self):
        student = self.register(1, room=self.room_a)
        response = self.client.patch(
            reverse('students:student-detail', args=[student.pk]),
            {'room_id': str(self.room_b.pk)}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deactivate_through_update(self):
        student = self.register(1, room=self.room_a)
        response = self.client.patch(
            reverse('students:student-detail', args=[student.pk]),
            {'status': 'inactive'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'inactive')
        self.assertIsNone(response.data['room'])
        self.room_a.refresh_from_db()
        self.assertEqual(self.room_a.occupancy_count, 0)

    def test_release_room(self):
        student = self.register(1, room=self.room_a)
        response = self.client.post(reverse('students:student-release-room', args=[student.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['room'])

    def test_delete_with_unpaid_fee(self):
        student = self.register(1)
        Fee.objects.create(
            student=student, hostel=self.hostel, amount=Decimal('100.00'),
            due_date=timezone.localdate() - timedelta(days=3)
        )
        response = self.client.delete(reverse('students:student-detail', args=[student.pk]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'protected_reference')

    def test_students_require_admin_role(self):
        user = User.objects.create_user('someone@example.com', 'testpass123', role=User.Role.STUDENT)
        self.client.force_authenticate(user)
        response = self.client.get(reverse('students:student-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class StudentPortalTestCase(StudentDataMixin, APITestCase):
    """Student portal endpoints"""

    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user('ada@example.com', 'testpass123', role=User.Role.STUDENT)
        self.student = self.register(1, room=self.room_a, user=self.user)
        self.client.force_authenticate(self.user)

    def test_profile(self):
        response = self.client.get(reverse('students:portal_profile'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['student_id'], 1)
        self.assertEqual(response.data['hostel_name'], 'North Hall')
        self.assertEqual(response.data['room_number'], '101')

    def test_own_fees_only(self):
        other = self.register(2)
        Fee.objects.create(student=self.student, hostel=self.hostel, amount=Decimal('3500.00'),
                           due_date=timezone.localdate())
        Fee.objects.create(student=other, hostel=self.hostel, amount=Decimal('3500.00'),
                           due_date=timezone.localdate())
        response = self.client.get(reverse('students:portal_fees'))
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['student_number'], 1)

    def test_request_transfer(self):
        response = self.client.post(reverse('students:portal_room_transfers'), {
            'to_room_id': str(self.room_b.pk), 'reason': 'Noise'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        transfer = RoomTransfer.objects.get()
        self.assertEqual(transfer.from_room, self.room_a)
        self.assertEqual(transfer.to_room, self.room_b)
        self.assertTrue(transfer.is_pending)

        response = self.client.get(reverse('students:portal_room_transfers'))
        self.assertEqual(len(response.data), 1)

    def test_transfer_to_own_room(self):
        response = self.client.post(reverse('students:portal_room_transfers'), {
            'to_room_id': str(self.room_a.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_transfer_to_other_hostel(self):
        response = self.client.post(reverse('students:portal_room_transfers'), {
            'to_room_id': str(self.far_room.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'room_unavailable')

    def test_transfer_without_room(self):
        room_services.release_room(self.student)
        response = self.client.post(reverse('students:portal_room_transfers'), {
            'to_room_id': str(self.room_b.pk)
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'no_room')

    def test_portal_requires_student_profile(self):
        user = User.objects.create_user('ghost@example.com', 'testpass123', role=User.Role.STUDENT)
        self.client.force_authenticate(user)
        response = self.client.get(reverse('students:portal_profile'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_use_portal(self):
        admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)
        self.client.force_authenticate(admin)
        response = self.client.get(reverse('students:portal_profile'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
