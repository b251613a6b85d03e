import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils.translation import gettext_lazy as _
from django.core.validators import RegexValidator


class UserManager(BaseUserManager):
    """
    Custom user manager for email-based authentication.
    """
    def get_admin_users(self):
        """Admins and super admins of the hostel console."""
        return self.filter(role__in=[User.Role.ADMIN, User.Role.SUPER_ADMIN], is_active=True)

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a regular user with an email and password.
        """
        if not email:
            raise ValueError(_('The Email field must be set'))

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return a super admin with Django admin access.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.SUPER_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model with email as primary identifier.

    ``role`` drives what the caller sees: super admins work across hostels,
    admins are restricted to ``hostel`` and students only reach the portal.
    """
    class Role(models.TextChoices):
        SUPER_ADMIN = 'super_admin', _('Super Administrator')
        ADMIN = 'admin', _('Administrator')
        STUDENT = 'student', _('Student')

    id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        primary_key=True,
    )
    username = None
    email = models.EmailField(
        _('email address'),
        unique=True,
        db_index=True,
        help_text=_('Primary email address for communication')
    )

    phone_regex = RegexValidator(
        regex=r'^\+?1?\d{9,15}$',
        message=_("Phone number must be entered in the format: '+999999999'. Up to 15 digits allowed.")
    )
    mobile = models.CharField(
        _('mobile number'),
        validators=[phone_regex],
        max_length=17,
        blank=True,
    )

    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        default=Role.ADMIN,
        db_index=True
    )
    hostel = models.ForeignKey(
        'hostels.Hostel',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users',
        verbose_name=_('hostel'),
        help_text=_('Hostel this user manages or lives in')
    )

    first_name = models.CharField(_('first name'), max_length=150, blank=True)
    last_name = models.CharField(_('last name'), max_length=150, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['role', 'hostel'], name='user_role_hostel_idx'),
        ]

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        """Return the full name of the user."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_super_admin(self):
        return self.role == self.Role.SUPER_ADMIN

    @property
    def is_hostel_admin(self):
        return self.role in (self.Role.ADMIN, self.Role.SUPER_ADMIN)

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT
