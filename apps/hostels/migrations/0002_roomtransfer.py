import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('hostels', '0001_initial'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RoomTransfer',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('reason', models.TextField(blank=True, verbose_name='reason')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20, verbose_name='status')),
                ('decided_at', models.DateTimeField(blank=True, null=True, verbose_name='decided at')),
                ('transfer_date', models.DateField(blank=True, null=True, verbose_name='transfer date')),
                ('admin_notes', models.TextField(blank=True, verbose_name='admin notes')),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='decided_room_transfers', to=settings.AUTH_USER_MODEL, verbose_name='decided by')),
                ('from_room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transfers_out', to='hostels.room', verbose_name='from room')),
                ('hostel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='room_transfers', to='hostels.hostel', verbose_name='hostel')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='room_transfers', to='students.student', verbose_name='student')),
                ('to_room', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transfers_in', to='hostels.room', verbose_name='to room')),
            ],
            options={
                'verbose_name': 'Room Transfer',
                'verbose_name_plural': 'Room Transfers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['hostel', 'status'], name='transfer_hostel_status_idx'),
                    models.Index(fields=['student', 'status'], name='transfer_student_status_idx'),
                ],
            },
        ),
    ]
