# apps/core/exceptions.py
"""
Error taxonomy for room allocation, transfers and fees.

Every error is reported synchronously to the caller with a readable message;
the API layer renders them through ``api_exception_handler``.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class HostelError(Exception):
    """Base class for hostel domain errors."""
    code = 'hostel_error'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _('The operation could not be completed.')

    def __init__(self, message=None):
        self.message = str(message or self.default_message)
        super().__init__(self.message)


class CapacityExceeded(HostelError):
    code = 'capacity_exceeded'
    default_message = _('Room is full.')


class InvalidCapacity(HostelError):
    code = 'invalid_capacity'
    default_message = _('Room capacity exceeds the capacity of its room type.')


class RoomUnavailable(HostelError):
    code = 'room_unavailable'
    default_message = _('Room is under maintenance.')


class AlreadyAssigned(HostelError):
    code = 'already_assigned'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('Student already holds a room. Use a room transfer instead.')


class NotFound(HostelError):
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = _('Record not found.')


class InvalidTransition(HostelError):
    code = 'invalid_transition'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('The record can no longer change to that status.')


class ProtectedReference(HostelError):
    code = 'protected_reference'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('Record is still referenced and cannot be deleted.')


def api_exception_handler(exc, context):
    """
    DRF exception handler that renders domain errors as
    ``{"error": message, "code": code}``.
    """
    if isinstance(exc, HostelError):
        view = context.get('view')
        set_rollback()
        logger.warning(f"{exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}")
        return Response({'error': exc.message, 'code': exc.code}, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            detail = exc.message_dict
        else:
            detail = exc.messages
        set_rollback()
        return Response({'error': detail, 'code': 'invalid'}, status=status.HTTP_400_BAD_REQUEST)

    return exception_handler(exc, context)
