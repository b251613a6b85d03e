# apps/students/views.py

from django.db import transaction
from django.db.models import Q
from django.utils.translation import gettext as _
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from apps.core.exceptions import NotFound
from apps.core.mixins import HostelScopedMixin
from apps.core.permissions import IsHostelAdmin, IsStudent
from apps.finance.serializers import FeeSerializer
from apps.hostels.models import Room
from apps.hostels.serializers import RoomTransferSerializer, StudentTransferRequestSerializer
from apps.hostels import services as room_services

from .models import Student
from .serializers import StudentSerializer, StudentProfileSerializer
from . import services


class StudentViewSet(HostelScopedMixin, viewsets.ModelViewSet):
    """
    Students of the caller's hostel. A room can be given on creation; later
    room changes go through allocation and transfers.
    """
    queryset = Student.objects.select_related('room__room_type', 'hostel')
    serializer_class = StudentSerializer
    permission_classes = [IsHostelAdmin]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        queryset = super().get_queryset()

        search = self.request.query_params.get('search')
        student_status = self.request.query_params.get('status')
        room = self.request.query_params.get('room_id')

        if search:
            query = Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(email__icontains=search)
            if search.isdigit():
                query |= Q(student_id=int(search))
            queryset = queryset.filter(query)
        if student_status:
            queryset = queryset.filter(status=student_status)
        if room:
            queryset = queryset.filter(room_id=room)

        return queryset

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        hostel = self.hostel_context.hostel_for_write()
        room = None
        room_id = data.pop('room_id', None)
        if room_id:
            room = Room.objects.filter(pk=room_id).first()
            if room is None:
                raise NotFound(_('Room not found'))
            self.check_hostel_access(room)
        serializer.instance = services.register_student(room=room, hostel=hostel, **data)

    @transaction.atomic
    def perform_update(self, serializer):
        new_status = serializer.validated_data.pop('status', None)
        serializer.validated_data.pop('room_id', None)
        student = serializer.save()
        if new_status and new_status != student.status:
            serializer.instance = services.set_student_status(student, new_status)

    def perform_destroy(self, instance):
        services.delete_student(instance)

    @action(detail=True, methods=['post'], url_path='release-room')
    def release_room(self, request, pk=None):
        """Take the student out of their room without assigning another."""
        student = room_services.release_room(self.get_object())
        return Response(self.get_serializer(student).data)


# Student portal

def _portal_student(request):
    return Student.objects.select_related('hostel', 'room__room_type').get(user=request.user)


@api_view(['GET'])
@permission_classes([IsStudent])
def portal_profile(request):
    student = _portal_student(request)
    return Response(StudentProfileSerializer(student).data)


@api_view(['GET'])
@permission_classes([IsStudent])
def portal_fees(request):
    student = _portal_student(request)
    fees = student.fees.order_by('-due_date')
    return Response(FeeSerializer(fees, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsStudent])
def portal_room_transfers(request):
    """
    A student's own transfer requests. New requests start from the
    student's current room and must target another room of their hostel
    that still has space.
    """
    student = _portal_student(request)

    if request.method == 'GET':
        transfers = student.room_transfers.select_related('from_room', 'to_room', 'decided_by')
        return Response(RoomTransferSerializer(transfers, many=True).data)

    serializer = StudentTransferRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if student.room_id is None:
        return Response(
            {'error': _('You are not currently assigned to a room'), 'code': 'no_room'},
            status=status.HTTP_400_BAD_REQUEST
        )
    to_room = Room.objects.filter(pk=serializer.validated_data['to_room_id']).first()
    if to_room is None:
        raise NotFound(_('Destination room not found'))

    transfer = room_services.request_transfer(student, to_room, reason=serializer.validated_data['reason'])
    return Response(RoomTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)
