import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Hostel',
            fields=[
                ('address_line_1', models.CharField(blank=True, max_length=255, verbose_name='address line 1')),
                ('address_line_2', models.CharField(blank=True, max_length=255, verbose_name='address line 2')),
                ('city', models.CharField(blank=True, max_length=100, verbose_name='city')),
                ('state', models.CharField(blank=True, max_length=100, verbose_name='state/province')),
                ('postal_code', models.CharField(blank=True, max_length=20, verbose_name='postal code')),
                ('country', models.CharField(blank=True, max_length=100, verbose_name='country')),
                ('phone', models.CharField(blank=True, max_length=20, verbose_name='phone number')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, verbose_name='hostel name')),
                ('code', models.CharField(max_length=20, unique=True, verbose_name='hostel code')),
                ('description', models.TextField(blank=True, verbose_name='description')),
                ('is_active', models.BooleanField(default=True, verbose_name='is active')),
            ],
            options={
                'verbose_name': 'Hostel',
                'verbose_name_plural': 'Hostels',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='RoomType',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=50, unique=True, verbose_name='type name')),
                ('capacity', models.PositiveIntegerField(help_text='Maximum occupants for rooms of this type', validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('price_per_month', models.DecimalField(blank=True, decimal_places=2, help_text='Proposed monthly hostel fee for rooms of this type', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)], verbose_name='price per month')),
                ('description', models.TextField(blank=True, verbose_name='description')),
            ],
            options={
                'verbose_name': 'Room Type',
                'verbose_name_plural': 'Room Types',
                'ordering': ['capacity', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('room_number', models.CharField(max_length=20, verbose_name='room number')),
                ('floor', models.IntegerField(blank=True, null=True, verbose_name='floor number')),
                ('capacity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('occupancy_count', models.PositiveIntegerField(default=0, editable=False, verbose_name='occupancy count')),
                ('is_under_maintenance', models.BooleanField(default=False, verbose_name='under maintenance')),
                ('amenities', models.TextField(blank=True, verbose_name='room amenities')),
                ('hostel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='hostels.hostel', verbose_name='hostel')),
                ('room_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rooms', to='hostels.roomtype', verbose_name='room type')),
            ],
            options={
                'verbose_name': 'Room',
                'verbose_name_plural': 'Rooms',
                'ordering': ['hostel', 'room_number'],
                'indexes': [models.Index(fields=['hostel', 'is_under_maintenance'], name='room_hostel_maint_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('hostel', 'room_number'), name='unique_room_number_per_hostel'),
                    models.CheckConstraint(condition=models.Q(('occupancy_count__lte', models.F('capacity'))), name='room_occupancy_within_capacity'),
                ],
            },
        ),
    ]
