# apps/hostels/views.py

from django.db.models import F, Q
from django.utils.translation import gettext as _
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import NotFound
from apps.core.mixins import HostelScopedMixin
from apps.core.permissions import IsHostelAdmin, IsSuperAdminOrReadOnly
from apps.students.models import Student

from .models import Hostel, RoomType, Room, RoomTransfer
from .serializers import (
    HostelSerializer, RoomTypeSerializer, RoomSerializer, AllocationSerializer,
    RoomTransferSerializer, TransferDecisionSerializer,
)
from . import services


UUID_LOOKUP = '[0-9a-fA-F-]{36}'

ROOM_STATUS_FILTERS = {
    Room.RoomStatus.MAINTENANCE: Q(is_under_maintenance=True),
    Room.RoomStatus.AVAILABLE: Q(is_under_maintenance=False, occupancy_count=0),
    Room.RoomStatus.PARTIALLY_OCCUPIED: Q(
        is_under_maintenance=False, occupancy_count__gt=0, occupancy_count__lt=F('capacity')
    ),
    Room.RoomStatus.OCCUPIED: Q(is_under_maintenance=False, occupancy_count__gte=F('capacity')),
}


class HostelViewSet(viewsets.ModelViewSet):
    """Hostels. Admins only see their own; super admins manage all of them."""
    queryset = Hostel.objects.all()
    serializer_class = HostelSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_super_admin:
            queryset = queryset.filter(pk=self.request.user.hostel_id)
        return queryset


class RoomTypeViewSet(viewsets.ModelViewSet):
    queryset = RoomType.objects.all()
    serializer_class = RoomTypeSerializer
    permission_classes = [IsHostelAdmin]
    lookup_value_regex = UUID_LOOKUP

    @action(detail=False, methods=['get', 'post'], url_path='all')
    def all_types(self, request):
        """Every room type, smallest first. ``POST`` creates one."""
        if request.method == 'POST':
            return self.create(request)
        serializer = self.get_serializer(self.get_queryset().order_by('capacity', 'name'), many=True)
        return Response(serializer.data)

    def perform_destroy(self, instance):
        services.delete_room_type(instance)


class RoomViewSet(HostelScopedMixin, viewsets.ModelViewSet):
    """
    Rooms of the caller's hostel, with derived status and remaining capacity.
    Occupancy only changes through ``allocate`` and room transfers.
    """
    queryset = Room.objects.select_related('room_type', 'hostel')
    serializer_class = RoomSerializer
    permission_classes = [IsHostelAdmin]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        queryset = super().get_queryset()

        room_status = self.request.query_params.get('status')
        room_type = self.request.query_params.get('room_type')
        floor = self.request.query_params.get('floor')

        if room_status in ROOM_STATUS_FILTERS:
            queryset = queryset.filter(ROOM_STATUS_FILTERS[room_status])
        if room_type:
            queryset = queryset.filter(room_type_id=room_type)
        if floor:
            queryset = queryset.filter(floor=floor)

        return queryset.order_by('room_number')

    def perform_destroy(self, instance):
        services.delete_room(instance)

    @action(detail=False, methods=['get'], url_path='availability/available')
    def available(self, request):
        """Rooms that can take at least one more student."""
        queryset = self.get_queryset().filter(
            is_under_maintenance=False, occupancy_count__lt=F('capacity')
        )
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['post'])
    def allocate(self, request):
        """Assign a student who has no room to a room with space."""
        serializer = AllocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        student = Student.objects.filter(pk=serializer.validated_data['student_id']).first()
        if student is None:
            raise NotFound(_('Student not found'))
        room = Room.objects.filter(pk=serializer.validated_data['room_id']).first()
        if room is None:
            raise NotFound(_('Room not found'))
        self.check_hostel_access(student)
        self.check_hostel_access(room)

        student, room = services.allocate_room(student, room)
        return Response({
            'message': _('Room allocated successfully'),
            'student_id': student.pk,
            'room': RoomSerializer(room).data,
        })


class RoomTransferViewSet(HostelScopedMixin, viewsets.ModelViewSet):
    """
    Room transfer requests. ``PUT``/``PATCH`` with ``status`` approves or
    rejects a pending request; ``DELETE`` only removes the record.
    """
    queryset = RoomTransfer.objects.select_related('student', 'from_room', 'to_room', 'decided_by')
    serializer_class = RoomTransferSerializer
    permission_classes = [IsHostelAdmin]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        queryset = super().get_queryset()
        transfer_status = self.request.query_params.get('status')
        if transfer_status:
            queryset = queryset.filter(status=transfer_status)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        student = data['student']
        self.check_hostel_access(student)
        self.check_hostel_access(data['to_room'])

        transfer = services.request_transfer(
            student, data['to_room'], reason=data.get('reason', ''), from_room=data.get('from_room')
        )
        return Response(self.get_serializer(transfer).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        transfer = self.get_object()
        decision = TransferDecisionSerializer(data=request.data)
        decision.is_valid(raise_exception=True)
        data = decision.validated_data

        if data['status'] == RoomTransfer.TransferStatus.APPROVED:
            transfer = services.approve_transfer(
                transfer, decided_by=request.user,
                transfer_date=data.get('transfer_date'), admin_notes=data['admin_notes'],
            )
        else:
            transfer = services.reject_transfer(
                transfer, decided_by=request.user, admin_notes=data['admin_notes']
            )
        return Response(self.get_serializer(transfer).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)
