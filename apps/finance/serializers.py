from rest_framework import serializers

from .models import Fee


class FeeSerializer(serializers.ModelSerializer):
    hostel = serializers.PrimaryKeyRelatedField(read_only=True)
    first_name = serializers.CharField(source='student.first_name', read_only=True)
    last_name = serializers.CharField(source='student.last_name', read_only=True)
    student_number = serializers.IntegerField(source='student.student_id', read_only=True)
    effective_status = serializers.CharField(read_only=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)

    class Meta:
        model = Fee
        fields = [
            'id', 'student', 'first_name', 'last_name', 'student_number', 'hostel',
            'fee_type', 'amount', 'due_date', 'status', 'effective_status', 'paid_date',
            'payment_method', 'receipt_number', 'created_at', 'updated_at',
        ]
        read_only_fields = ['status', 'paid_date', 'receipt_number']


class FeeStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Fee.FeeStatus.choices, default=Fee.FeeStatus.PAID)
    paid_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(
        choices=Fee.PaymentMethod.choices, required=False, allow_blank=True
    )
