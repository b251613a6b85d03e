# apps/users/forms.py

from django import forms
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from .models import User


class UserCreationForm(forms.ModelForm):
    """
    Form for creating console and portal accounts with email login.
    """
    password1 = forms.CharField(
        label=_("Password"),
        widget=forms.PasswordInput,
        help_text=_("Password must be at least 8 characters long and contain letters and numbers.")
    )
    password2 = forms.CharField(
        label=_("Password confirmation"),
        widget=forms.PasswordInput,
        help_text=_("Enter the same password as above, for verification.")
    )

    class Meta:
        model = User
        fields = ['email', 'first_name', 'last_name', 'mobile', 'role', 'hostel']
        help_texts = {
            'email': _('Required. A valid email address that will be used for login.'),
            'hostel': _('Required for administrators and students.'),
        }

    def clean_email(self):
        email = self.cleaned_data.get('email')
        if email:
            email = User.objects.normalize_email(email)
            if User.objects.filter(email__iexact=email).exists():
                raise ValidationError(
                    _("A user with this email address already exists.")
                )
        return email

    def clean_password2(self):
        password1 = self.cleaned_data.get("password1")
        password2 = self.cleaned_data.get("password2")

        if password1 and password2 and password1 != password2:
            raise ValidationError(
                _("The two password fields didn't match.")
            )

        if password1:
            try:
                validate_password(password1)
            except ValidationError as e:
                raise ValidationError(e.messages)

        return password2

    def clean(self):
        cleaned_data = super().clean()
        role = cleaned_data.get('role')
        if role and role != User.Role.SUPER_ADMIN and not cleaned_data.get('hostel'):
            self.add_error('hostel', _('Administrators and students must belong to a hostel.'))
        return cleaned_data

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        if user.role == User.Role.SUPER_ADMIN:
            user.is_staff = True

        if commit:
            user.save()
        return user
