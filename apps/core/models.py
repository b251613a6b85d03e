# apps/core/models.py
import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _


class AddressModel(models.Model):
    """
    Abstract model for storing address information.
    """
    address_line_1 = models.CharField(_('address line 1'), max_length=255, blank=True)
    address_line_2 = models.CharField(_('address line 2'), max_length=255, blank=True)
    city = models.CharField(_('city'), max_length=100, blank=True)
    state = models.CharField(_('state/province'), max_length=100, blank=True)
    postal_code = models.CharField(_('postal code'), max_length=20, blank=True)
    country = models.CharField(_('country'), max_length=100, blank=True)

    class Meta:
        abstract = True

    @property
    def full_address(self):
        """Return formatted full address."""
        parts = [
            self.address_line_1,
            self.address_line_2,
            self.city,
            self.state,
            self.postal_code,
            self.country
        ]
        return ', '.join(filter(None, parts))


class ContactModel(models.Model):
    """
    Abstract model for storing contact information.
    """
    phone = models.CharField(_('phone number'), max_length=20, blank=True)
    email = models.EmailField(_('email address'), blank=True)

    class Meta:
        abstract = True


class CoreBaseModel(models.Model):
    """
    Base model shared by every concrete hostel record:
    - UUID primary key
    - Created/updated timestamps
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        abstract = True
