from rest_framework import serializers

from .models import Hostel, RoomType, Room, RoomTransfer
from . import services


class HostelSerializer(serializers.ModelSerializer):
    total_capacity = serializers.IntegerField(read_only=True)
    current_occupancy = serializers.IntegerField(read_only=True)
    occupancy_percentage = serializers.FloatField(read_only=True)

    class Meta:
        model = Hostel
        fields = [
            'id', 'name', 'code', 'description', 'is_active',
            'address_line_1', 'address_line_2', 'city', 'state', 'postal_code', 'country',
            'phone', 'email', 'total_capacity', 'current_occupancy', 'occupancy_percentage',
            'created_at', 'updated_at',
        ]


class RoomTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = RoomType
        fields = ['id', 'name', 'capacity', 'price_per_month', 'description', 'created_at', 'updated_at']

    def create(self, validated_data):
        return services.save_room_type(RoomType(**validated_data))

    def update(self, instance, validated_data):
        return services.save_room_type(instance, **validated_data)


class RoomSerializer(serializers.ModelSerializer):
    hostel = serializers.PrimaryKeyRelatedField(read_only=True)
    status = serializers.CharField(read_only=True)
    capacity_remaining = serializers.IntegerField(read_only=True)
    type_name = serializers.CharField(source='room_type.name', read_only=True)
    type_capacity = serializers.IntegerField(source='room_type.capacity', read_only=True)
    price_per_month = serializers.DecimalField(
        source='room_type.price_per_month', max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = Room
        fields = [
            'id', 'hostel', 'room_number', 'room_type', 'type_name', 'type_capacity',
            'price_per_month', 'floor', 'capacity', 'occupancy_count', 'capacity_remaining',
            'is_under_maintenance', 'status', 'amenities', 'created_at', 'updated_at',
        ]
        read_only_fields = ['occupancy_count']

    def create(self, validated_data):
        return services.save_room(Room(**validated_data))

    def update(self, instance, validated_data):
        return services.save_room(instance, **validated_data)


class AllocationSerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    room_id = serializers.UUIDField()


class RoomTransferSerializer(serializers.ModelSerializer):
    hostel = serializers.PrimaryKeyRelatedField(read_only=True)
    student_first_name = serializers.CharField(source='student.first_name', read_only=True)
    student_last_name = serializers.CharField(source='student.last_name', read_only=True)
    student_number = serializers.IntegerField(source='student.student_id', read_only=True)
    from_room_number = serializers.CharField(source='from_room.room_number', read_only=True, default=None)
    to_room_number = serializers.CharField(source='to_room.room_number', read_only=True, default=None)
    decided_by_name = serializers.CharField(source='decided_by.email', read_only=True, default=None)
    requested_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = RoomTransfer
        fields = [
            'id', 'hostel', 'student', 'student_first_name', 'student_last_name', 'student_number',
            'from_room', 'from_room_number', 'to_room', 'to_room_number', 'reason', 'status',
            'requested_at', 'decided_by', 'decided_by_name', 'decided_at', 'transfer_date', 'admin_notes',
        ]
        read_only_fields = ['status', 'decided_by', 'decided_at', 'transfer_date', 'admin_notes']
        extra_kwargs = {
            'to_room': {'allow_null': False, 'required': True},
            'from_room': {'required': False},
        }


class TransferDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        RoomTransfer.TransferStatus.APPROVED,
        RoomTransfer.TransferStatus.REJECTED,
    ])
    transfer_date = serializers.DateField(required=False, allow_null=True)
    admin_notes = serializers.CharField(required=False, allow_blank=True, default='')


class StudentTransferRequestSerializer(serializers.Serializer):
    to_room_id = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')
