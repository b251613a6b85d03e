# apps/hostels/services.py
"""
Room capacity ledger, room allocation and room transfers.

Every mutation of ``Room.occupancy_count`` goes through this module. Each
operation runs in a single transaction with the touched room rows locked, so
a capacity check and the occupancy update it guards cannot interleave with a
concurrent allocation or transfer on the same room.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext as _

from apps.core.exceptions import (
    AlreadyAssigned, CapacityExceeded, InvalidCapacity, InvalidTransition,
    NotFound, ProtectedReference, RoomUnavailable,
)
from apps.students.models import Student

from .models import Room, RoomTransfer

logger = logging.getLogger(__name__)


# Capacity ledger

def capacity_remaining(room):
    return room.capacity - room.occupancy_count


def ensure_eligible(room):
    """Raise unless ``room`` can take one more student."""
    if room.is_under_maintenance:
        raise RoomUnavailable(_('Room %(number)s is under maintenance.') % {'number': room.room_number})
    if capacity_remaining(room) <= 0:
        raise CapacityExceeded(_('Room %(number)s is full.') % {'number': room.room_number})


def validate_capacity(room_type, capacity, occupancy_count=0):
    """
    Check a room capacity against its room type and current occupants.
    Never clamps: an out of range value is rejected.
    """
    if capacity is None or capacity < 1:
        raise InvalidCapacity(_('Room capacity must be at least 1.'))
    if capacity > room_type.capacity:
        raise InvalidCapacity(
            _('Room capacity %(capacity)s exceeds the %(type)s room type capacity of %(max)s.') % {
                'capacity': capacity, 'type': room_type.name, 'max': room_type.capacity
            }
        )
    if capacity < occupancy_count:
        raise InvalidCapacity(
            _('Room capacity %(capacity)s is below its current occupancy of %(occupancy)s.') % {
                'capacity': capacity, 'occupancy': occupancy_count
            }
        )


def lock_rooms(*room_ids):
    """
    Lock the given rooms for the rest of the transaction and return them
    keyed by primary key. Rows are locked in primary key order.
    """
    ids = sorted({pk for pk in room_ids if pk is not None}, key=str)
    rooms = Room.objects.select_for_update().filter(pk__in=ids).order_by('pk')
    return {room.pk: room for room in rooms}


def _occupy(room):
    ensure_eligible(room)
    room.occupancy_count += 1
    room.save(update_fields=['occupancy_count', 'updated_at'])


def _vacate(room):
    if room.occupancy_count == 0:
        logger.warning(f"Room {room.pk} vacated with occupancy already at 0")
        return
    room.occupancy_count -= 1
    room.save(update_fields=['occupancy_count', 'updated_at'])


@transaction.atomic
def save_room(room, **changes):
    """
    Create or update a room, validating its capacity against the room type
    and, for existing rooms, against the occupancy held under lock.
    """
    if room.pk and not room._state.adding:
        locked = lock_rooms(room.pk).get(room.pk)
        if locked is None:
            raise NotFound(_('Room not found'))
        room.occupancy_count = locked.occupancy_count

    for field, value in changes.items():
        setattr(room, field, value)

    validate_capacity(room.room_type, room.capacity, room.occupancy_count)
    duplicate = Room.objects.filter(hostel_id=room.hostel_id, room_number=room.room_number).exclude(pk=room.pk)
    if duplicate.exists():
        raise ValidationError({'room_number': _('Room number already exists')})
    room.save()
    logger.info(f"Room {room.room_number} saved with capacity {room.capacity} ({room.status})")
    return room


@transaction.atomic
def recount_occupancy(room):
    """Reconcile ``occupancy_count`` with the students referencing the room."""
    room = lock_rooms(room.pk)[room.pk]
    actual = Student.objects.filter(room_id=room.pk).count()
    if actual > room.capacity:
        raise CapacityExceeded(
            _('Room %(number)s holds %(actual)s students but has capacity %(capacity)s.') % {
                'number': room.room_number, 'actual': actual, 'capacity': room.capacity
            }
        )
    if actual != room.occupancy_count:
        logger.info(f"Room {room.room_number} occupancy corrected from {room.occupancy_count} to {actual}")
        room.occupancy_count = actual
        room.save(update_fields=['occupancy_count', 'updated_at'])
    return room


@transaction.atomic
def delete_room(room):
    """Delete a room that has no occupants and no pending transfer requests."""
    room = lock_rooms(room.pk).get(room.pk)
    if room is None:
        raise NotFound(_('Room not found'))
    if room.occupancy_count > 0 or room.students.exists():
        raise ProtectedReference(_('Room %(number)s still has occupants.') % {'number': room.room_number})
    pending = RoomTransfer.objects.filter(status=RoomTransfer.TransferStatus.PENDING)
    if pending.filter(from_room=room).exists() or pending.filter(to_room=room).exists():
        raise ProtectedReference(
            _('Room %(number)s is referenced by pending transfer requests.') % {'number': room.room_number}
        )
    logger.info(f"Deleting room {room.room_number} in hostel {room.hostel_id}")
    room.delete()


@transaction.atomic
def save_room_type(room_type, **changes):
    """A room type may not shrink below the capacity of a room using it."""
    for field, value in changes.items():
        setattr(room_type, field, value)

    if room_type.pk and not room_type._state.adding:
        rooms = lock_rooms(*room_type.rooms.values_list('pk', flat=True))
        too_large = [room for room in rooms.values() if room.capacity > room_type.capacity]
        if too_large:
            raise InvalidCapacity(
                _('Room type capacity %(capacity)s is below the capacity of rooms %(rooms)s.') % {
                    'capacity': room_type.capacity,
                    'rooms': ', '.join(sorted(room.room_number for room in too_large)),
                }
            )
    room_type.save()
    return room_type


def delete_room_type(room_type):
    if room_type.rooms.exists():
        raise ProtectedReference(_('Room type %(name)s is used by existing rooms.') % {'name': room_type.name})
    room_type.delete()


# Allocation

def _lock_student(student):
    try:
        return Student.objects.select_for_update().get(pk=student.pk)
    except Student.DoesNotExist:
        raise NotFound(_('Student not found'))


@transaction.atomic
def allocate_room(student, room):
    """
    Bind a student without a room to ``room``.

    Returns the updated ``(student, room)`` pair. Nothing is written when
    any check fails.
    """
    student = _lock_student(student)
    room = lock_rooms(room.pk).get(room.pk)
    if room is None:
        raise NotFound(_('Room not found'))

    ensure_eligible(room)
    if student.room_id is not None:
        raise AlreadyAssigned(
            _('Student %(student)s already holds a room. Use a room transfer instead.') % {
                'student': student.student_id
            }
        )
    if room.hostel_id != student.hostel_id:
        raise RoomUnavailable(_('Room %(number)s belongs to a different hostel.') % {'number': room.room_number})

    _occupy(room)
    student.room = room
    student.save(update_fields=['room', 'updated_at'])

    logger.info(
        f"Allocated student {student.student_id} to room {room.room_number} "
        f"({room.occupancy_count}/{room.capacity})"
    )
    return student, room


@transaction.atomic
def release_room(student):
    """Clear a student's room assignment and free the place."""
    student = _lock_student(student)
    if student.room_id is None:
        return student

    room = lock_rooms(student.room_id)[student.room_id]
    _vacate(room)
    student.room = None
    student.save(update_fields=['room', 'updated_at'])

    logger.info(f"Released room {room.room_number} held by student {student.student_id}")
    return student


# Transfers

@transaction.atomic
def request_transfer(student, to_room, reason='', from_room=None):
    """
    File a pending transfer request. The destination must have space now;
    it is checked again when the request is approved.

    The student and both rooms are read back under lock; the instances
    passed in may be stale.
    """
    student = _lock_student(student)
    from_room_id = from_room.pk if from_room is not None else student.room_id

    rooms = lock_rooms(from_room_id, to_room.pk)
    to_room = rooms.get(to_room.pk)
    if to_room is None:
        raise NotFound(_('Destination room not found'))
    from_room = rooms.get(from_room_id)

    if to_room.hostel_id != student.hostel_id:
        raise RoomUnavailable(_('You can only transfer to rooms in your hostel'))
    if from_room is not None and from_room.pk == to_room.pk:
        raise AlreadyAssigned(_('Student is already in room %(number)s.') % {'number': to_room.room_number})
    ensure_eligible(to_room)

    transfer = RoomTransfer.objects.create(
        hostel_id=student.hostel_id,
        student=student,
        from_room=from_room,
        to_room=to_room,
        reason=reason,
    )
    logger.info(f"Transfer {transfer.pk} requested for student {student.student_id} to room {to_room.room_number}")
    return transfer


def _lock_pending_transfer(transfer):
    try:
        transfer = RoomTransfer.objects.select_for_update().get(pk=transfer.pk)
    except RoomTransfer.DoesNotExist:
        raise NotFound(_('Transfer request not found'))
    if not transfer.is_pending:
        raise InvalidTransition(
            _('Transfer request is already %(status)s.') % {'status': transfer.get_status_display().lower()}
        )
    return transfer


@transaction.atomic
def approve_transfer(transfer, decided_by=None, transfer_date=None, admin_notes=''):
    """
    Approve a pending request and move the student.

    Destination capacity is re-validated under lock; if the room filled up
    since the request was filed the approval fails and the request stays
    pending with both rooms untouched.
    """
    transfer = _lock_pending_transfer(transfer)
    if transfer.to_room_id is None:
        raise NotFound(_('Destination room no longer exists'))

    student = _lock_student(transfer.student)
    if student.room_id == transfer.to_room_id:
        raise AlreadyAssigned(_('Student is already in the destination room.'))

    rooms = lock_rooms(student.room_id, transfer.to_room_id)
    destination = rooms[transfer.to_room_id]
    source = rooms.get(student.room_id)

    ensure_eligible(destination)
    if source is not None:
        _vacate(source)
    _occupy(destination)

    student.room = destination
    student.save(update_fields=['room', 'updated_at'])

    now = timezone.now()
    transfer.status = RoomTransfer.TransferStatus.APPROVED
    transfer.decided_by = decided_by
    transfer.decided_at = now
    transfer.transfer_date = transfer_date or timezone.localdate(now)
    if admin_notes:
        transfer.admin_notes = admin_notes
    transfer.save()

    logger.info(
        f"Transfer {transfer.pk} approved: student {student.student_id} moved "
        f"from {source.room_number if source else 'no room'} to {destination.room_number}"
    )
    return transfer


@transaction.atomic
def reject_transfer(transfer, decided_by=None, admin_notes=''):
    """Reject a pending request. Rooms and the student are left as they are."""
    transfer = _lock_pending_transfer(transfer)
    transfer.status = RoomTransfer.TransferStatus.REJECTED
    transfer.decided_by = decided_by
    transfer.decided_at = timezone.now()
    if admin_notes:
        transfer.admin_notes = admin_notes
    transfer.save()

    logger.info(f"Transfer {transfer.pk} rejected")
    return transfer
