# apps/students/services.py

import logging

from django.db import transaction
from django.utils.translation import gettext as _

from apps.core.exceptions import ProtectedReference
from apps.finance.models import Fee
from apps.hostels.models import RoomTransfer
from apps.hostels.services import allocate_room, release_room

from .models import Student

logger = logging.getLogger(__name__)


@transaction.atomic
def register_student(room=None, **fields):
    """Create a student, optionally allocating a room in the same unit of work."""
    student = Student.objects.create(**fields)
    if room is not None:
        student, _room = allocate_room(student, room)
    logger.info(f"Registered student {student.student_id} in hostel {student.hostel_id}")
    return student


@transaction.atomic
def set_student_status(student, status):
    """Inactive students give up their room."""
    if status == Student.StudentStatus.INACTIVE and student.room_id is not None:
        student = release_room(student)
    student.status = status
    student.save(update_fields=['status', 'updated_at'])
    return student


@transaction.atomic
def delete_student(student):
    """
    Delete a student with no outstanding fees and no pending transfer
    requests. Their room place is released first.
    """
    outstanding = student.fees.filter(status__in=[Fee.FeeStatus.PENDING, Fee.FeeStatus.OVERDUE])
    if outstanding.exists():
        raise ProtectedReference(
            _('Student %(student)s has %(count)s unpaid fees.') % {
                'student': student.student_id, 'count': outstanding.count()
            }
        )
    if student.room_transfers.filter(status=RoomTransfer.TransferStatus.PENDING).exists():
        raise ProtectedReference(
            _('Student %(student)s has pending room transfer requests.') % {'student': student.student_id}
        )

    if student.room_id is not None:
        student = release_room(student)
    logger.info(f"Deleting student {student.student_id}")
    student.delete()
