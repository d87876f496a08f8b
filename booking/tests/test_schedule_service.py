import pytest
from django.utils import timezone

from booking.exceptions import Conflict, InvalidArgument, NotFound
from booking.models import AuditEvent, Queue, Schedule
from booking.services import schedules as svc

pytestmark = pytest.mark.django_db


def _create(doctor, polyclinic, **kwargs):
    params = dict(
        doctor_id=doctor.id,
        polyclinic_id=polyclinic.id,
        date=timezone.localdate(),
        start_time='08:00',
        end_time='12:00',
        total_slots=20,
    )
    params.update(kwargs)
    return svc.create_schedule(**params)


def test_create_schedule_initialises_counters(doctor, polyclinic, admin_user):
    s = _create(doctor, polyclinic, user=admin_user)
    assert s.schedule_id.startswith('SCH')
    assert (s.total_slots, s.booked_slots, s.available_slots) == (20, 0, 20)
    assert s.status == Schedule.STATUS_ACTIVE
    assert s.created_by == admin_user
    assert AuditEvent.objects.filter(action='schedule_create', object_id=s.id).exists()


def test_create_schedule_requires_doctor_and_polyclinic(doctor, polyclinic, patient):
    with pytest.raises(NotFound):
        _create(patient, polyclinic)
    with pytest.raises(NotFound):
        svc.create_schedule(doctor_id=doctor.id, polyclinic_id=999, date=timezone.localdate(),
                            start_time='08:00', end_time='12:00', total_slots=5)


def test_create_schedule_rejects_inverted_times(doctor, polyclinic):
    with pytest.raises(InvalidArgument):
        _create(doctor, polyclinic, start_time='12:00', end_time='08:00')


@pytest.mark.parametrize('start,end', [('07:00', '09:00'), ('11:59', '13:00'), ('09:00', '10:00'), ('07:00', '13:00')])
def test_overlapping_schedule_conflicts(doctor, polyclinic, start, end):
    _create(doctor, polyclinic)
    with pytest.raises(Conflict):
        _create(doctor, polyclinic, start_time=start, end_time=end)


def test_adjacent_and_other_doctor_schedules_are_allowed(doctor, other_doctor, polyclinic, tomorrow):
    _create(doctor, polyclinic)
    _create(doctor, polyclinic, start_time='12:00', end_time='15:00')
    _create(other_doctor, polyclinic)
    _create(doctor, polyclinic, date=tomorrow)
    assert Schedule.objects.count() == 4


def test_cancelled_schedule_still_blocks_its_time_range(doctor, polyclinic):
    s = _create(doctor, polyclinic)
    svc.cancel_schedule(s.id)
    with pytest.raises(Conflict):
        _create(doctor, polyclinic, start_time='10:00', end_time='11:00')


def test_update_total_below_booked_changes_nothing(make_schedule):
    s = make_schedule(total_slots=20, booked_slots=10)
    with pytest.raises(InvalidArgument):
        svc.update_schedule(s.id, {'total_slots': 5, 'notes': 'shrink'})
    s.refresh_from_db()
    assert (s.total_slots, s.booked_slots, s.available_slots, s.notes) == (20, 10, 10, '')


def test_update_total_slots_must_stay_positive(make_schedule):
    s = make_schedule(total_slots=5)
    with pytest.raises(InvalidArgument) as exc:
        svc.update_schedule(s.id, {'total_slots': 0})
    assert exc.value.message == 'Total slots must be at least 1.'
    s.refresh_from_db()
    assert (s.total_slots, s.available_slots) == (5, 5)


def test_update_total_recomputes_available(make_schedule, admin_user):
    s = make_schedule(total_slots=20, booked_slots=10)
    s = svc.update_schedule(s.id, {'total_slots': 12}, user=admin_user)
    s.refresh_from_db()
    assert (s.total_slots, s.booked_slots, s.available_slots) == (12, 10, 2)
    assert s.updated_by == admin_user


def test_update_times_checks_overlap_with_other_schedules(make_schedule):
    morning = make_schedule(start_time='08:00', end_time='10:00')
    make_schedule(start_time='10:00', end_time='12:00')

    # Moving within its own range is not a conflict with itself
    svc.update_schedule(morning.id, {'start_time': '08:30'})
    with pytest.raises(Conflict):
        svc.update_schedule(morning.id, {'end_time': '11:00'})
    morning.refresh_from_db()
    assert (morning.start_time, morning.end_time) == ('08:30', '10:00')


def test_update_missing_schedule(db):
    with pytest.raises(NotFound):
        svc.update_schedule(404, {'notes': 'x'})


def test_closing_schedule_with_active_queues_conflicts(service, schedule, patient):
    queue = service.create_entry(patient.id, schedule.id)
    with pytest.raises(Conflict):
        svc.update_schedule(schedule.id, {'status': Schedule.STATUS_COMPLETED})

    service.update_status(queue.id, Queue.STATUS_IN_PROGRESS)
    service.update_status(queue.id, Queue.STATUS_COMPLETED)
    s = svc.update_schedule(schedule.id, {'status': Schedule.STATUS_COMPLETED})
    assert s.status == Schedule.STATUS_COMPLETED


def test_cancel_schedule_with_booking_conflicts(service, schedule, patient):
    service.create_entry(patient.id, schedule.id)
    with pytest.raises(Conflict):
        svc.cancel_schedule(schedule.id)
    schedule.refresh_from_db()
    assert schedule.status == Schedule.STATUS_ACTIVE


def test_cancel_schedule_is_soft(schedule):
    svc.cancel_schedule(schedule.id)
    schedule.refresh_from_db()
    assert schedule.status == Schedule.STATUS_CANCELLED
    assert (schedule.booked_slots, schedule.available_slots) == (0, 10)


def test_list_schedules_filters_and_paginates(make_schedule, other_doctor, tomorrow):
    for i in range(3):
        make_schedule(start_time=f'0{i + 6}:00', end_time=f'0{i + 7}:00')
    make_schedule(doctor=other_doctor)
    make_schedule(date=tomorrow, status=Schedule.STATUS_CANCELLED)

    data, total = svc.list_schedules(page=1, limit=2)
    assert total == 5 and len(data) == 2

    data, total = svc.list_schedules(doctor_id=other_doctor.id)
    assert total == 1 and data[0]['doctor']['id'] == other_doctor.id

    data, total = svc.list_schedules(status=Schedule.STATUS_CANCELLED)
    assert total == 1 and data[0]['date'] == tomorrow.isoformat()

    data, total = svc.list_schedules(date=timezone.localdate(), page=2, limit=3)
    assert total == 4 and len(data) == 1


def test_schedule_detail_lists_queues(service, schedule, make_patient):
    for _ in range(2):
        service.create_entry(make_patient().id, schedule.id)
    detail = svc.schedule_detail(schedule.id)
    assert detail['bookedSlots'] == 2
    assert [q['queueNumber'] for q in detail['queues']] == [1, 2]


def test_available_schedules(make_schedule, doctor, tomorrow):
    open_ = make_schedule(start_time='08:00', end_time='10:00')
    make_schedule(start_time='10:00', end_time='11:00', total_slots=1, booked_slots=1)
    make_schedule(start_time='13:00', end_time='14:00', status=Schedule.STATUS_CANCELLED)
    make_schedule(date=tomorrow)

    data = svc.available_schedules(doctor.id, timezone.localdate())
    assert [d['id'] for d in data] == [open_.id]


def test_schedule_stats(make_schedule, tomorrow):
    make_schedule(total_slots=10, booked_slots=4)
    make_schedule(start_time='13:00', end_time='15:00', status=Schedule.STATUS_CANCELLED)
    make_schedule(date=tomorrow)

    stats = svc.schedule_stats()
    assert (stats['total'], stats['active'], stats['cancelled']) == (3, 2, 1)
    assert stats['today'] == {'schedules': 1, 'totalSlots': 10, 'bookedSlots': 4, 'availableSlots': 6}
