# apps/core/tests.py

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.test import APIRequestFactory
from rest_framework.request import Request

from apps.hostels.models import Hostel, RoomType, Room
from apps.students.models import Student
from apps.users.models import User

from .context import HostelContext
from .exceptions import AlreadyAssigned, CapacityExceeded, NotFound, api_exception_handler


class HostelContextTestCase(TestCase):
    """Per-request hostel scoping"""

    def setUp(self):
        self.factory = APIRequestFactory()
        self.north = Hostel.objects.create(name='North Hall', code='NH')
        self.south = Hostel.objects.create(name='South Hall', code='SH')
        room_type = RoomType.objects.create(name='Double', capacity=2)
        Room.objects.create(hostel=self.north, room_number='1', room_type=room_type, capacity=2)
        Room.objects.create(hostel=self.south, room_number='1', room_type=room_type, capacity=2)

        self.admin = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.north)
        self.super_admin = User.objects.create_superuser('root@example.com', 'testpass123')

    def context_for(self, user, **params):
        request = Request(self.factory.get('/api/rooms/', params))
        request.user = user
        return HostelContext.from_request(request)

    def test_admin_is_pinned_to_hostel(self):
        context = self.context_for(self.admin, hostel_id=str(self.south.pk))
        self.assertEqual(context.hostel_id, self.north.pk)
        rooms = context.scope(Room.objects.all())
        self.assertEqual(list(rooms.values_list('hostel_id', flat=True)), [self.north.pk])

    def test_admin_without_hostel(self):
        admin = User.objects.create_user('stray@example.com', 'testpass123')
        with self.assertRaises(PermissionDenied):
            self.context_for(admin)

    def test_super_admin_sees_all_or_picks(self):
        context = self.context_for(self.super_admin)
        self.assertEqual(context.scope(Room.objects.all()).count(), 2)

        context = self.context_for(self.super_admin, hostel_id=str(self.south.pk))
        self.assertTrue(context.explicit)
        self.assertEqual(context.scope(Room.objects.all()).get().hostel_id, self.south.pk)
        self.assertEqual(context.hostel_for_write(), self.south)

    def test_super_admin_needs_hostel_to_write(self):
        context = self.context_for(self.super_admin)
        with self.assertRaises(ValidationError):
            context.hostel_for_write()

    def test_unknown_hostel(self):
        context = self.context_for(self.super_admin, hostel_id='00000000-0000-0000-0000-000000000000')
        with self.assertRaises(NotFound):
            context.hostel_for_write()

    def test_student_uses_profile_hostel(self):
        user = User.objects.create_user('ada@example.com', 'testpass123', role=User.Role.STUDENT)
        Student.objects.create(student_id=1, first_name='Ada', last_name='Obi', hostel=self.south, user=user)
        context = self.context_for(user)
        self.assertEqual(context.hostel_id, self.south.pk)

    def test_can_access(self):
        context = self.context_for(self.admin)
        self.assertTrue(context.can_access(self.north.rooms.get()))
        self.assertFalse(context.can_access(self.south.rooms.get()))
        self.assertTrue(self.context_for(self.super_admin).can_access(self.south.rooms.get()))


class ExceptionHandlerTestCase(SimpleTestCase):
    """Rendering of domain errors"""

    def test_domain_error(self):
        response = api_exception_handler(CapacityExceeded('Room 101 is full.'), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Room 101 is full.', 'code': 'capacity_exceeded'})

    def test_default_message_and_status(self):
        response = api_exception_handler(AlreadyAssigned(), {})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'already_assigned')
        self.assertTrue(response.data['error'])

    def test_not_found(self):
        response = api_exception_handler(NotFound('Student not found'), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_django_validation_error(self):
        response = api_exception_handler(DjangoValidationError({'amount': 'Fee amount must be greater than 0'}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], {'amount': ['Fee amount must be greater than 0']})

    def test_other_errors_use_drf_handler(self):
        response = api_exception_handler(PermissionDenied(), {})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIsNone(api_exception_handler(ValueError('boom'), {}))
