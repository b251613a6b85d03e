"""
Management command to reconcile room occupancy counts with the students
actually assigned to each room.
"""

from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import HostelError
from apps.hostels.models import Hostel, Room
from apps.hostels import services


class Command(BaseCommand):
    help = 'Recount room occupancy from student room assignments'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hostel',
            type=str,
            help='Only recount rooms of the hostel with this code'
        )

    def handle(self, *args, **options):
        rooms = Room.objects.all()
        if options.get('hostel'):
            try:
                hostel = Hostel.objects.get(code__iexact=options['hostel'])
            except Hostel.DoesNotExist:
                raise CommandError(f'Hostel "{options["hostel"]}" not found')
            rooms = rooms.filter(hostel=hostel)

        corrected = 0
        failed = 0
        for room in rooms.order_by('pk'):
            before = room.occupancy_count
            try:
                room = services.recount_occupancy(room)
            except HostelError as e:
                failed += 1
                self.stdout.write(self.style.ERROR(e.message))
                continue
            if room.occupancy_count != before:
                corrected += 1
                self.stdout.write(
                    f'  Room {room.room_number}: {before} -> {room.occupancy_count}'
                )

        self.stdout.write(self.style.SUCCESS(f'{corrected} rooms corrected'))
        if failed:
            raise CommandError(f'{failed} rooms hold more students than their capacity')
