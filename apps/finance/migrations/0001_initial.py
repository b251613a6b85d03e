import apps.finance.models
import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('hostels', '0001_initial'),
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Fee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('fee_type', models.CharField(choices=[('hostel', 'Hostel Fee'), ('mess', 'Mess Fee'), ('security', 'Security Deposit'), ('fine', 'Fine')], default='hostel', max_length=20, verbose_name='fee type')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='amount')),
                ('due_date', models.DateField(verbose_name='due date')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('overdue', 'Overdue')], db_index=True, default='pending', max_length=20, verbose_name='status')),
                ('paid_date', models.DateField(blank=True, null=True, verbose_name='paid date')),
                ('payment_method', models.CharField(blank=True, choices=[('cash', 'Cash'), ('bank_transfer', 'Bank Transfer'), ('card', 'Card'), ('online', 'Online Payment'), ('other', 'Other')], max_length=20, verbose_name='payment method')),
                ('receipt_number', models.CharField(default=apps.finance.models.generate_receipt_number, editable=False, max_length=50, unique=True, verbose_name='receipt number')),
                ('hostel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fees', to='hostels.hostel', verbose_name='hostel')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fees', to='students.student', verbose_name='student')),
            ],
            options={
                'verbose_name': 'Fee',
                'verbose_name_plural': 'Fees',
                'ordering': ['-due_date'],
                'indexes': [
                    models.Index(fields=['hostel', 'status'], name='fee_hostel_status_idx'),
                    models.Index(fields=['student', 'status'], name='fee_student_status_idx'),
                    models.Index(fields=['due_date', 'status'], name='fee_due_status_idx'),
                ],
            },
        ),
    ]
