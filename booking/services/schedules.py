"""
Schedule management.

Administrators create doctor schedules, adjust them and soft-cancel
them.  The slot counters themselves belong to the booking service;
here they are only re-derived when ``total_slots`` changes.
"""
from __future__ import annotations

import logging
from datetime import date as date_cls
from typing import Optional

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from booking.exceptions import Conflict, InvalidArgument, NotFound
from booking.models import Polyclinic, Queue, Schedule, User
from booking.services.audit import log_action
from booking.services.queues import format_queue

logger = logging.getLogger(__name__)

ACTIVE_QUEUE_STATUSES = (Queue.STATUS_WAITING, Queue.STATUS_IN_PROGRESS)


def format_schedule(s: Schedule) -> dict:
    return {
        'id': s.id,
        'scheduleId': s.schedule_id,
        'doctor': {
            'id': s.doctor_id,
            'name': s.doctor.display_name,
            'specialization': s.doctor.specialization,
        },
        'polyclinic': {'id': s.polyclinic_id, 'name': s.polyclinic.name},
        'date': s.date.isoformat(),
        'startTime': s.start_time,
        'endTime': s.end_time,
        'totalSlots': s.total_slots,
        'bookedSlots': s.booked_slots,
        'availableSlots': s.available_slots,
        'status': s.status,
        'notes': s.notes,
        'createdAt': s.created_at.isoformat() if s.created_at else None,
        'updatedAt': s.updated_at.isoformat() if s.updated_at else None,
    }


def _overlapping(doctor_id: int, day: date_cls, start: str, end: str, exclude_pk: Optional[int] = None):
    # Cancelled schedules still block the time range.
    qs = Schedule.objects.filter(doctor_id=doctor_id, date=day, start_time__lt=end, end_time__gt=start)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.first()


def _get_doctor(doctor_id: int) -> User:
    doctor = User.objects.filter(pk=doctor_id, role=User.ROLE_DOCTOR).first()
    if not doctor:
        raise NotFound('Doctor not found.')
    return doctor


def _get_polyclinic(polyclinic_id: int) -> Polyclinic:
    polyclinic = Polyclinic.objects.filter(pk=polyclinic_id).first()
    if not polyclinic:
        raise NotFound('Polyclinic not found.')
    return polyclinic


@transaction.atomic
def create_schedule(*, doctor_id: int, polyclinic_id: int, date: date_cls, start_time: str, end_time: str,
                    total_slots: int, notes: str = '', status: str = Schedule.STATUS_ACTIVE,
                    user: Optional[User] = None) -> Schedule:
    doctor = _get_doctor(doctor_id)
    polyclinic = _get_polyclinic(polyclinic_id)
    if total_slots < 1:
        raise InvalidArgument('Total slots must be at least 1.')
    if start_time >= end_time:
        raise InvalidArgument('End time must be after start time.')

    clash = _overlapping(doctor.id, date, start_time, end_time)
    if clash:
        raise Conflict(
            f'Doctor already has a schedule from {clash.start_time} to {clash.end_time} on {date:%Y-%m-%d}.'
        )

    schedule = Schedule.objects.create(
        doctor=doctor,
        polyclinic=polyclinic,
        date=date,
        start_time=start_time,
        end_time=end_time,
        total_slots=total_slots,
        booked_slots=0,
        status=status or Schedule.STATUS_ACTIVE,
        notes=notes or '',
        created_by=user,
    )
    log_action(user=user, action='schedule_create', object_type='schedule', object_id=schedule.id,
               detail={'scheduleId': schedule.schedule_id})
    logger.info('Schedule %s created for doctor %s on %s', schedule.schedule_id, doctor.id, date)
    return schedule


@transaction.atomic
def update_schedule(schedule_id: int, patch: dict, user: Optional[User] = None) -> Schedule:
    """Apply ``patch`` (snake_case keys) to a schedule.

    Nothing is written unless every check passes: shrinking
    ``total_slots`` below ``booked_slots`` is refused, a new time range
    must not overlap the doctor's other schedules, and the schedule
    cannot be closed while patients are still waiting.
    """
    schedule = Schedule.objects.select_for_update().filter(pk=schedule_id).first()
    if not schedule:
        raise NotFound('Schedule not found.')

    if 'total_slots' in patch:
        new_total = int(patch['total_slots'])
        if new_total < 1:
            raise InvalidArgument('Total slots must be at least 1.')
        if new_total < schedule.booked_slots:
            raise InvalidArgument('Total slots cannot be lower than the number of booked slots.')
        schedule.total_slots = new_total

    new_date = patch.get('date', schedule.date)
    new_start = patch.get('start_time', schedule.start_time)
    new_end = patch.get('end_time', schedule.end_time)
    if new_start >= new_end:
        raise InvalidArgument('End time must be after start time.')
    if (new_date, new_start, new_end) != (schedule.date, schedule.start_time, schedule.end_time):
        clash = _overlapping(schedule.doctor_id, new_date, new_start, new_end, exclude_pk=schedule.pk)
        if clash:
            raise Conflict(
                f'Doctor already has a schedule from {clash.start_time} to {clash.end_time} on {new_date:%Y-%m-%d}.'
            )
        schedule.date, schedule.start_time, schedule.end_time = new_date, new_start, new_end

    new_status = patch.get('status')
    if new_status in (Schedule.STATUS_CANCELLED, Schedule.STATUS_COMPLETED) and new_status != schedule.status:
        active = schedule.queues.filter(status__in=ACTIVE_QUEUE_STATUSES).count()
        if active:
            raise Conflict(f'Cannot mark schedule {new_status} while {active} queue entries are still active.')
    if new_status:
        schedule.status = new_status

    if 'polyclinic_id' in patch:
        schedule.polyclinic = _get_polyclinic(patch['polyclinic_id'])
    if 'notes' in patch:
        schedule.notes = patch['notes'] or ''

    schedule.updated_by = user
    schedule.save()
    log_action(user=user, action='schedule_update', object_type='schedule', object_id=schedule.id,
               detail={'fields': sorted(patch)})
    return schedule


@transaction.atomic
def cancel_schedule(schedule_id: int, user: Optional[User] = None) -> Schedule:
    """Soft-cancel a schedule that has never been booked."""
    schedule = Schedule.objects.select_for_update().filter(pk=schedule_id).first()
    if not schedule:
        raise NotFound('Schedule not found.')
    booked = schedule.queues.count()
    if booked:
        raise Conflict(f'Cannot cancel a schedule that already has {booked} queue entries.')
    schedule.status = Schedule.STATUS_CANCELLED
    schedule.updated_by = user
    schedule.save(update_fields=['status', 'updated_by', 'updated_at'])
    log_action(user=user, action='schedule_cancel', object_type='schedule', object_id=schedule.id)
    logger.info('Schedule %s cancelled', schedule.schedule_id)
    return schedule


def list_schedules(*, doctor_id: Optional[int] = None, polyclinic_id: Optional[int] = None,
                   date: Optional[date_cls] = None, status: Optional[str] = None,
                   page: int = 1, limit: int = 10) -> tuple[list[dict], int]:
    qs = Schedule.objects.select_related('doctor', 'polyclinic')
    if doctor_id:
        qs = qs.filter(doctor_id=doctor_id)
    if polyclinic_id:
        qs = qs.filter(polyclinic_id=polyclinic_id)
    if date:
        qs = qs.filter(date=date)
    if status:
        qs = qs.filter(status=status)

    total = qs.count()
    start = (page - 1) * limit
    items = qs.order_by('date', 'start_time', 'id')[start:start + limit]
    return [format_schedule(s) for s in items], total


def schedule_detail(schedule_id: int) -> dict:
    schedule = Schedule.objects.select_related('doctor', 'polyclinic').filter(pk=schedule_id).first()
    if not schedule:
        raise NotFound('Schedule not found.')
    queues = schedule.queues.select_related('patient', 'doctor', 'polyclinic').order_by('queue_number')
    return {**format_schedule(schedule), 'queues': [format_queue(q) for q in queues]}


def available_schedules(doctor_id: int, day: date_cls) -> list[dict]:
    qs = (
        Schedule.objects.select_related('doctor', 'polyclinic')
        .filter(doctor_id=doctor_id, date=day, status=Schedule.STATUS_ACTIVE, available_slots__gt=0)
        .order_by('start_time')
    )
    return [format_schedule(s) for s in qs]


def schedule_stats(today: Optional[date_cls] = None) -> dict:
    today = today or timezone.localdate()
    by_status = dict(
        Schedule.objects.values('status').annotate(n=Count('id')).values_list('status', 'n')
    )
    todays = Schedule.objects.filter(date=today).exclude(status=Schedule.STATUS_CANCELLED)
    totals = todays.aggregate(total=Sum('total_slots'), booked=Sum('booked_slots'), available=Sum('available_slots'))
    return {
        'total': sum(by_status.values()),
        'active': by_status.get(Schedule.STATUS_ACTIVE, 0),
        'cancelled': by_status.get(Schedule.STATUS_CANCELLED, 0),
        'completed': by_status.get(Schedule.STATUS_COMPLETED, 0),
        'today': {
            'schedules': todays.count(),
            'totalSlots': totals['total'] or 0,
            'bookedSlots': totals['booked'] or 0,
            'availableSlots': totals['available'] or 0,
        },
    }
