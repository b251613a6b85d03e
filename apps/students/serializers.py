from rest_framework import serializers

from .models import Student


class StudentSerializer(serializers.ModelSerializer):
    hostel = serializers.PrimaryKeyRelatedField(read_only=True)
    room = serializers.PrimaryKeyRelatedField(read_only=True)
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)
    room_type = serializers.CharField(source='room.room_type.name', read_only=True, default=None)
    room_id = serializers.UUIDField(write_only=True, required=False, allow_null=True)

    class Meta:
        model = Student
        fields = [
            'id', 'student_id', 'first_name', 'last_name', 'email', 'phone',
            'date_of_birth', 'gender', 'course', 'year_of_study', 'hostel',
            'room', 'room_id', 'room_number', 'room_type', 'status', 'created_at', 'updated_at',
        ]

    def validate(self, attrs):
        if self.instance is not None and attrs.get('room_id'):
            raise serializers.ValidationError({
                'room_id': 'Use room allocation or a room transfer to change an existing student\'s room.'
            })
        return attrs


class StudentProfileSerializer(StudentSerializer):
    hostel_name = serializers.CharField(source='hostel.name', read_only=True)

    class Meta(StudentSerializer.Meta):
        fields = StudentSerializer.Meta.fields + ['hostel_name']
