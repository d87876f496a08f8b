"""
Populate the database with demo users, polyclinics, schedules and queues.

Safe to re-run: users and polyclinics are matched by username / name,
and schedules that would overlap an existing one are skipped.
"""
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.utils import timezone

from booking.exceptions import BookingError
from booking.models import Polyclinic, Schedule, User
from booking.services.queues import BookingService
from booking.services.schedules import create_schedule

USERS = [
    ('superadmin', User.ROLE_SUPER_ADMIN, 'Super', 'Admin', ''),
    ('admin1', User.ROLE_ADMIN, 'Ayu', 'Lestari', ''),
    ('staff1', User.ROLE_STAFF, 'Budi', 'Santoso', ''),
    ('dr.sari', User.ROLE_DOCTOR, 'Sari', 'Wijaya', 'Penyakit Dalam'),
    ('dr.andi', User.ROLE_DOCTOR, 'Andi', 'Pratama', 'Anak'),
    ('patient1', User.ROLE_PATIENT, 'Dewi', 'Anggraini', ''),
    ('patient2', User.ROLE_PATIENT, 'Rizky', 'Hidayat', ''),
    ('patient3', User.ROLE_PATIENT, 'Putri', 'Maharani', ''),
    ('patient4', User.ROLE_PATIENT, 'Agus', 'Setiawan', ''),
]

POLYCLINICS = [
    ('Poli Umum', 'Umum'),
    ('Poli Anak', 'Anak'),
    ('Poli Penyakit Dalam', 'Spesialis'),
]


class Command(BaseCommand):
    help = 'Populate database with demo schedules and queue entries'

    def add_arguments(self, parser):
        parser.add_argument('--password', default='password123', help='Password for every demo account')
        parser.add_argument('--days', type=int, default=2, help='Number of days of schedules to create')

    def handle(self, *args, **options):
        users = self.create_users(options['password'])
        polyclinics = self.create_polyclinics()
        schedules = self.create_schedules(users, polyclinics, options['days'])
        self.create_queues(users, schedules)
        self.stdout.write(self.style.SUCCESS('Demo data ready.'))

    def create_users(self, password):
        users = {}
        for username, role, first, last, specialization in USERS:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'role': role,
                    'first_name': first,
                    'last_name': last,
                    'specialization': specialization,
                    'password': make_password(password),
                    'is_staff': role in (User.ROLE_SUPER_ADMIN, User.ROLE_ADMIN),
                    'is_superuser': role == User.ROLE_SUPER_ADMIN,
                },
            )
            users[username] = user
            if created:
                self.stdout.write(f'user {username} ({role})')
        return users

    def create_polyclinics(self):
        polyclinics = []
        for name, department in POLYCLINICS:
            polyclinic, _ = Polyclinic.objects.get_or_create(name=name, defaults={'department': department})
            polyclinics.append(polyclinic)
        return polyclinics

    def create_schedules(self, users, polyclinics, days):
        admin = users['admin1']
        doctors = [users['dr.sari'], users['dr.andi']]
        today = timezone.localdate()
        created = []
        for offset in range(days):
            day = today + timedelta(days=offset)
            for doctor, polyclinic in zip(doctors, polyclinics[1:]):
                for start, end in (('08:00', '12:00'), ('13:00', '16:00')):
                    try:
                        schedule = create_schedule(
                            doctor_id=doctor.id, polyclinic_id=polyclinic.id, date=day,
                            start_time=start, end_time=end, total_slots=10, user=admin,
                        )
                    except BookingError as e:
                        self.stdout.write(f'skip {doctor.username} {day} {start}: {e.message}')
                        continue
                    created.append(schedule)
        self.stdout.write(f'{len(created)} schedules created')
        return created

    def create_queues(self, users, schedules):
        service = BookingService()
        patients = [u for u in users.values() if u.role == User.ROLE_PATIENT]
        todays = [s for s in schedules if s.date == timezone.localdate() and s.status == Schedule.STATUS_ACTIVE]
        booked = 0
        for schedule in todays[:2]:
            for patient in patients:
                try:
                    service.create_entry(patient.id, schedule.id, operator=users['staff1'])
                    booked += 1
                except BookingError as e:
                    self.stdout.write(f'skip booking {patient.username}: {e.message}')
        self.stdout.write(f'{booked} queue entries booked')
