# apps/finance/views.py

from django.utils import timezone
from django.utils.translation import gettext as _
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import NotFound
from apps.core.mixins import HostelScopedMixin
from apps.core.permissions import IsHostelAdmin
from apps.students.models import Student

from .models import Fee
from .serializers import FeeSerializer, FeeStatusSerializer
from . import services


class FeeViewSet(HostelScopedMixin, viewsets.ModelViewSet):
    """
    Fees of the caller's hostel.

    ``POST`` creates a pending fee; a ``hostel`` fee without an amount is
    priced from the student's room type. ``PUT``/``PATCH`` changes the
    status, marking the fee paid by default.
    """
    queryset = Fee.objects.select_related('student', 'hostel')
    serializer_class = FeeSerializer
    permission_classes = [IsHostelAdmin]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        queryset = super().get_queryset()

        fee_status = self.request.query_params.get('status')
        fee_type = self.request.query_params.get('fee_type')
        student = self.request.query_params.get('student_id')

        if fee_status == Fee.FeeStatus.OVERDUE:
            queryset = services.overdue_fees(queryset)
        elif fee_status == Fee.FeeStatus.PENDING:
            queryset = queryset.filter(status=fee_status, due_date__gte=timezone.localdate())
        elif fee_status:
            queryset = queryset.filter(status=fee_status)
        if fee_type:
            queryset = queryset.filter(fee_type=fee_type)
        if student:
            queryset = queryset.filter(student_id=student)

        return queryset

    def perform_create(self, serializer):
        data = serializer.validated_data
        student = data['student']
        self.check_hostel_access(student)
        serializer.instance = services.create_fee(
            student,
            data.get('fee_type', Fee.FeeType.HOSTEL),
            amount=data.get('amount'),
            due_date=data.get('due_date'),
            payment_method=data.get('payment_method', ''),
            hostel=student.hostel,
        )

    def update(self, request, *args, **kwargs):
        fee = self.get_object()
        serializer = FeeStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fee = services.update_fee_status(
            fee,
            serializer.validated_data['status'],
            paid_date=serializer.validated_data.get('paid_date'),
            payment_method=serializer.validated_data.get('payment_method'),
        )
        return Response(self.get_serializer(fee).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    @action(detail=False, methods=['get'], url_path=r'calculate/(?P<student_pk>[0-9a-fA-F-]{36})')
    def calculate(self, request, student_pk=None):
        """Proposed monthly hostel fee for a student, from their room type."""
        student = Student.objects.select_related('room__room_type').filter(pk=student_pk).first()
        if student is None:
            raise NotFound(_('Student not found'))
        self.check_hostel_access(student)
        return Response(services.calculate_hostel_fee(student).as_dict())

    @action(detail=False, methods=['get'], url_path='stats/overview')
    def stats(self, request):
        return Response(services.fee_statistics(self.get_queryset()))

    @action(detail=False, methods=['get'], url_path='overdue/list')
    def overdue(self, request):
        fees = services.overdue_fees(self.get_queryset())
        return Response(self.get_serializer(fees, many=True).data)

    @action(detail=False, methods=['get'], url_path='receipts/all')
    def receipts(self, request):
        fees = self.get_queryset().filter(status=Fee.FeeStatus.PAID).order_by('-paid_date')
        return Response(self.get_serializer(fees, many=True).data)
