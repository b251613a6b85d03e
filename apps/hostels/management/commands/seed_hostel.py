"""
Management command to create a demo hostel with room types, rooms and an
administrator account.
"""

from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email, ValidationError
from django.db import transaction

from apps.hostels.models import Hostel, RoomType, Room
from apps.hostels import services
from apps.users.models import User

ROOM_TYPES = [
    ('Single', 1, Decimal('5000.00')),
    ('Double', 2, Decimal('3500.00')),
    ('Triple', 3, Decimal('2500.00')),
]


class Command(BaseCommand):
    help = 'Create a hostel with the standard room types, a block of rooms and an admin user'

    def add_arguments(self, parser):
        parser.add_argument(
            'name',
            type=str,
            help='Name of the hostel'
        )
        parser.add_argument(
            'code',
            type=str,
            help='Unique code for the hostel'
        )
        parser.add_argument(
            '--floors',
            type=int,
            default=2,
            help='Number of floors to create rooms on (default: 2)'
        )
        parser.add_argument(
            '--rooms_per_floor',
            type=int,
            default=6,
            help='Rooms per floor (default: 6)'
        )
        parser.add_argument(
            '--admin_email',
            type=str,
            help='Email of the hostel administrator to create'
        )
        parser.add_argument(
            '--admin_password',
            type=str,
            default=None,
            help='Password for the administrator (an unusable password is set when omitted)'
        )

    def handle(self, *args, **options):
        name = options['name']
        code = options['code'].upper()
        floors = options['floors']
        per_floor = options['rooms_per_floor']
        admin_email = options.get('admin_email')

        if floors < 1 or per_floor < 1:
            raise CommandError('Floors and rooms per floor must be at least 1')
        if Hostel.objects.filter(code__iexact=code).exists():
            raise CommandError(f'Hostel with code "{code}" already exists')
        if admin_email:
            try:
                validate_email(admin_email)
            except ValidationError:
                raise CommandError('Invalid admin email address')
            if User.objects.filter(email__iexact=admin_email).exists():
                raise CommandError(f'User "{admin_email}" already exists')

        with transaction.atomic():
            hostel = Hostel.objects.create(name=name, code=code)
            room_types = []
            for type_name, capacity, price in ROOM_TYPES:
                room_type, _created = RoomType.objects.get_or_create(
                    name=type_name,
                    defaults={'capacity': capacity, 'price_per_month': price}
                )
                room_types.append(room_type)

            created = 0
            for floor in range(1, floors + 1):
                for position in range(1, per_floor + 1):
                    room_type = room_types[(position - 1) % len(room_types)]
                    services.save_room(Room(
                        hostel=hostel,
                        room_number=f'{floor}{position:02d}',
                        floor=floor,
                        room_type=room_type,
                        capacity=room_type.capacity,
                    ))
                    created += 1

            self.stdout.write(
                self.style.SUCCESS(f'Created hostel "{hostel.name}" ({hostel.code}) with {created} rooms')
            )

            if admin_email:
                admin = User.objects.create_user(
                    admin_email,
                    options['admin_password'],
                    role=User.Role.ADMIN,
                    hostel=hostel,
                )
                self.stdout.write(self.style.SUCCESS(f'Created admin user {admin.email}'))

        self.stdout.write(f'  Total capacity: {hostel.total_capacity}')
