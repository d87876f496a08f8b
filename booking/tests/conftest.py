from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone

from booking.models import Polyclinic, Schedule, User
from booking.services.queues import BookingService

PASSWORD = 'P@ssw0rd1'


class RecordingNotifier:
    """Collects ``publish`` calls instead of talking to a channel layer."""

    def __init__(self):
        self.events = []
        self.groups = []

    def publish(self, event, payload, groups=None):
        self.events.append((event, payload))
        self.groups.append(groups)

    def named(self, event):
        return [payload for name, payload in self.events if name == event]


@pytest.fixture(autouse=True)
def _clear_cache():
    # Throttle counters and queue stats live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='admin1', password=PASSWORD, role='admin')


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(username='staff1', password=PASSWORD, role='staff')


@pytest.fixture
def doctor(db):
    return User.objects.create_user(
        username='dr.sari', password=PASSWORD, role='doctor',
        first_name='Sari', last_name='Wijaya', specialization='Penyakit Dalam',
    )


@pytest.fixture
def other_doctor(db):
    return User.objects.create_user(username='dr.andi', password=PASSWORD, role='doctor')


@pytest.fixture
def make_patient(db):
    counter = {'n': 0}

    def _make(**kwargs):
        counter['n'] += 1
        kwargs.setdefault('username', f"patient{counter['n']}")
        kwargs.setdefault('role', 'patient')
        return User.objects.create_user(password=PASSWORD, **kwargs)

    return _make


@pytest.fixture
def patient(make_patient):
    return make_patient(first_name='Dewi', last_name='Anggraini')


@pytest.fixture
def polyclinic(db):
    return Polyclinic.objects.create(name='Poli Umum', department='Umum')


@pytest.fixture
def make_schedule(doctor, polyclinic):
    def _make(**kwargs):
        kwargs.setdefault('doctor', doctor)
        kwargs.setdefault('polyclinic', polyclinic)
        kwargs.setdefault('date', timezone.localdate())
        kwargs.setdefault('start_time', '08:00')
        kwargs.setdefault('end_time', '12:00')
        kwargs.setdefault('total_slots', 10)
        return Schedule.objects.create(**kwargs)

    return _make


@pytest.fixture
def schedule(make_schedule):
    return make_schedule()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(notifier):
    return BookingService(notifier=notifier)


@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)
