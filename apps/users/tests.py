# apps/users/tests.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.hostels.models import Hostel

from .forms import UserCreationForm

User = get_user_model()


class UserModelTestCase(TestCase):
    """Test cases for the email based user model"""

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')

    def test_create_user(self):
        user = User.objects.create_user('Admin@Example.COM', 'testpass123', hostel=self.hostel)
        self.assertEqual(user.email, 'Admin@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_hostel_admin)
        self.assertFalse(user.is_super_admin)
        self.assertFalse(user.is_staff)

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user('', 'testpass123')

    def test_create_superuser(self):
        user = User.objects.create_superuser('root@example.com', 'testpass123')
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertEqual(user.role, User.Role.SUPER_ADMIN)
        self.assertTrue(user.is_super_admin)
        self.assertTrue(user.is_hostel_admin)

    def test_student_role(self):
        user = User.objects.create_user('ada@example.com', 'testpass123', role=User.Role.STUDENT)
        self.assertTrue(user.is_student)
        self.assertFalse(user.is_hostel_admin)

    def test_admin_users(self):
        User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)
        User.objects.create_user('ada@example.com', 'testpass123', role=User.Role.STUDENT)
        User.objects.create_superuser('root@example.com', 'testpass123')
        emails = set(User.objects.get_admin_users().values_list('email', flat=True))
        self.assertEqual(emails, {'admin@example.com', 'root@example.com'})

    def test_full_name(self):
        user = User.objects.create_user('ada@example.com', 'testpass123', first_name='Ada', last_name='Obi')
        self.assertEqual(user.full_name, 'Ada Obi')
        self.assertEqual(str(user), 'ada@example.com')


class UserCreationFormTestCase(TestCase):

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')

    def form_data(self, **overrides):
        data = {
            'email': 'warden@example.com',
            'first_name': 'Ngozi',
            'last_name': 'Eze',
            'mobile': '',
            'role': User.Role.ADMIN,
            'hostel': self.hostel.pk,
            'password1': 'Hostel-pass-2024',
            'password2': 'Hostel-pass-2024',
        }
        data.update(overrides)
        return data

    def test_valid(self):
        form = UserCreationForm(data=self.form_data())
        self.assertTrue(form.is_valid(), form.errors)
        user = form.save()
        self.assertTrue(user.check_password('Hostel-pass-2024'))

    def test_admin_needs_hostel(self):
        form = UserCreationForm(data=self.form_data(hostel=''))
        self.assertFalse(form.is_valid())
        self.assertIn('hostel', form.errors)

    def test_passwords_must_match(self):
        form = UserCreationForm(data=self.form_data(password2='Other-pass-2024'))
        self.assertFalse(form.is_valid())
        self.assertIn('password2', form.errors)

    def test_duplicate_email(self):
        User.objects.create_user('warden@example.com', 'testpass123', hostel=self.hostel)
        form = UserCreationForm(data=self.form_data())
        self.assertFalse(form.is_valid())
        self.assertIn('email', form.errors)


class TokenAuthTestCase(APITestCase):
    """Token login for the API"""

    def setUp(self):
        self.hostel = Hostel.objects.create(name='North Hall', code='NH')
        self.user = User.objects.create_user('admin@example.com', 'testpass123', hostel=self.hostel)

    def test_obtain_token_and_call_api(self):
        response = self.client.post(reverse('api_token'), {
            'username': 'admin@example.com', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        token = response.data['token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        response = self.client.get(reverse('hostels:room-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_wrong_password(self):
        response = self.client.post(reverse('api_token'), {
            'username': 'admin@example.com', 'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
