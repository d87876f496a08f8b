"""
Queue booking.

``BookingService`` is the only code that touches a schedule's slot
counters.  Every mutation runs in one transaction: the schedule row is
locked, the counters move with a conditional ``UPDATE`` so they cannot
go out of range, and the day's queue snapshot is published to the
notifier once the transaction commits.
"""
from __future__ import annotations

import logging
from datetime import date as date_cls, datetime
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Avg, Count, F, Max, Q
from django.utils import timezone
from prometheus_client import Counter

from booking.exceptions import CapacityExceeded, Conflict, InvalidState, NotFound
from booking.models import Queue, QueueTransition, Schedule, User
from booking.realtime.notifier import ChannelsNotifier
from booking.services.notifications import format_notification, notification_groups, notify_new_appointment
from booking.utils import status_slug

logger = logging.getLogger(__name__)

QUEUE_ENTRIES_CREATED = Counter('booking_queue_entries_created_total', 'Queue entries booked')
QUEUE_ENTRIES_CANCELLED = Counter('booking_queue_entries_cancelled_total', 'Queue entries cancelled')
QUEUE_BOOKINGS_REJECTED = Counter('booking_queue_bookings_rejected_total', 'Bookings refused', ['reason'])

TRANSITIONS = {
    Queue.STATUS_WAITING: {Queue.STATUS_IN_PROGRESS, Queue.STATUS_CANCELLED, Queue.STATUS_NO_SHOW},
    Queue.STATUS_IN_PROGRESS: {Queue.STATUS_COMPLETED, Queue.STATUS_CANCELLED},
    Queue.STATUS_COMPLETED: set(),
    Queue.STATUS_CANCELLED: set(),
    Queue.STATUS_NO_SHOW: set(),
}

AVERAGE_CONSULTATION_MINUTES = 15
PRIORITY_MULTIPLIERS = {
    Queue.PRIORITY_EMERGENCY: 0.5,
    Queue.PRIORITY_URGENT: 0.7,
    Queue.PRIORITY_NORMAL: 1.0,
}
SNAPSHOT_LIMIT = 100


def can_transition(current: str, new: str) -> bool:
    """Return True if a queue entry may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, set())


def estimate_wait_minutes(queue_number: int, priority: str = Queue.PRIORITY_NORMAL) -> int:
    ahead = max(queue_number - 1, 0)
    multiplier = PRIORITY_MULTIPLIERS.get(priority, 1.0)
    return max(0, round(ahead * AVERAGE_CONSULTATION_MINUTES * multiplier))


def compute_wait_time(queue: Queue, now: Optional[datetime] = None) -> int:
    """Minutes the entry has been waiting; 0 once it is finished."""
    if queue.status in (Queue.STATUS_COMPLETED, Queue.STATUS_CANCELLED):
        return 0
    now = now or timezone.now()
    return max(0, int((now - queue.created_at).total_seconds() // 60))


def _minutes_between(start: Optional[datetime], end: datetime) -> Optional[int]:
    if start is None:
        return None
    return max(0, int((end - start).total_seconds() // 60))


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def stats_cache_key(day: date_cls) -> str:
    return f"queue-stats:{day.isoformat()}"


def format_queue(q: Queue, now: Optional[datetime] = None, with_history: bool = False) -> dict:
    data = {
        'id': q.id,
        'queueId': q.queue_id,
        'queueNumber': q.queue_number,
        'patient': {'id': q.patient_id, 'name': q.patient.display_name},
        'doctor': {'id': q.doctor_id, 'name': q.doctor.display_name},
        'polyclinic': {'id': q.polyclinic_id, 'name': q.polyclinic.name},
        'scheduleId': q.schedule_id,
        'queueDate': q.queue_date.isoformat(),
        'appointmentTime': q.appointment_time,
        'status': q.status,
        'priority': q.priority,
        'waitTime': compute_wait_time(q, now),
        'estimatedWaitTime': q.estimated_wait_time,
        'actualWaitTime': q.actual_wait_time,
        'consultationDuration': q.consultation_duration,
        'registrationTime': _iso(q.registration_time),
        'calledTime': _iso(q.called_time),
        'startConsultationTime': _iso(q.start_consultation_time),
        'endConsultationTime': _iso(q.end_consultation_time),
        'notes': q.notes,
        'complaints': q.complaints,
        'createdAt': _iso(q.created_at),
        'updatedAt': _iso(q.updated_at),
    }
    if with_history:
        data['transitionHistory'] = [
            {
                'from': t.from_status,
                'to': t.to_status,
                'operator': t.operator.username if t.operator else '',
                'timestamp': t.timestamp.isoformat(),
                'reason': t.reason,
            }
            for t in q.transitions.select_related('operator').order_by('timestamp', 'id')
        ]
    return data


def today_snapshot(day: Optional[date_cls] = None, now: Optional[datetime] = None) -> list[dict]:
    """The compact queue list broadcast to dashboards and returned by ``GET /queues``."""
    day = day or timezone.localdate()
    now = now or timezone.now()
    qs = (
        Queue.objects.select_related('patient', 'doctor', 'polyclinic')
        .filter(queue_date=day)
        .order_by('queue_number', 'id')[:SNAPSHOT_LIMIT]
    )
    return [
        {
            'id': q.id,
            'queueId': q.queue_id,
            'patientName': q.patient.display_name,
            'doctorName': q.doctor.display_name,
            'polyclinic': q.polyclinic.name,
            'appointmentTime': q.appointment_time,
            'status': status_slug(q.status),
            'priority': q.priority,
            'waitTime': compute_wait_time(q, now),
            'queueNumber': q.queue_number,
        }
        for q in qs
    ]


def queue_stats(day: Optional[date_cls] = None) -> dict:
    day = day or timezone.localdate()
    key = stats_cache_key(day)
    cached = cache.get(key)
    if cached is not None:
        return cached

    qs = Queue.objects.filter(queue_date=day)
    counts = dict(qs.values('status').annotate(n=Count('id')).values_list('status', 'n'))
    avg_wait = qs.filter(actual_wait_time__isnull=False).aggregate(v=Avg('actual_wait_time'))['v']
    data = {
        'date': day.isoformat(),
        'total': sum(counts.values()),
        'waiting': counts.get(Queue.STATUS_WAITING, 0),
        'inProgress': counts.get(Queue.STATUS_IN_PROGRESS, 0),
        'completed': counts.get(Queue.STATUS_COMPLETED, 0),
        'cancelled': counts.get(Queue.STATUS_CANCELLED, 0),
        'noShow': counts.get(Queue.STATUS_NO_SHOW, 0),
        'averageWaitTime': round(avg_wait) if avg_wait is not None else 0,
    }
    cache.set(key, data, settings.QUEUE_STATS_CACHE_SECONDS)
    return data


def today_summary(day: Optional[date_cls] = None) -> list[dict]:
    day = day or timezone.localdate()
    rows = (
        Queue.objects.filter(queue_date=day)
        .values('polyclinic_id', 'polyclinic__name')
        .annotate(
            total=Count('id'),
            waiting=Count('id', filter=Q(status=Queue.STATUS_WAITING)),
        )
        .order_by('-total', 'polyclinic__name')
    )
    return [
        {
            'polyclinicId': r['polyclinic_id'],
            'polyclinic': r['polyclinic__name'],
            'total': r['total'],
            'waiting': r['waiting'],
        }
        for r in rows
    ]


class BookingService:
    """Creates, advances and cancels queue entries against schedule capacity.

    ``notifier`` is any object with a ``publish(event, payload, groups=None)``
    method.  It is called after commit with the day's snapshot, and with
    the new-appointment notification for bookings; a failing notifier never
    affects the outcome of the operation.
    """

    def __init__(self, notifier=None):
        self.notifier = notifier

    def create_entry(self, patient_id: int, schedule_id: int, notes: Optional[str] = None,
                     complaints: Optional[str] = None, priority: str = Queue.PRIORITY_NORMAL,
                     operator: Optional[User] = None) -> Queue:
        with transaction.atomic():
            schedule = Schedule.objects.select_for_update().filter(pk=schedule_id).first()
            if not schedule:
                raise NotFound('Schedule not found.')
            patient = User.objects.filter(pk=patient_id, role=User.ROLE_PATIENT).first()
            if not patient:
                raise NotFound('Patient not found.')
            if schedule.status != Schedule.STATUS_ACTIVE:
                QUEUE_BOOKINGS_REJECTED.labels(reason='inactive').inc()
                raise InvalidState(f'Schedule is {schedule.status}, bookings are closed.')
            duplicate = (
                Queue.objects.filter(schedule=schedule, patient=patient)
                .exclude(status=Queue.STATUS_CANCELLED)
                .exists()
            )
            if duplicate:
                QUEUE_BOOKINGS_REJECTED.labels(reason='duplicate').inc()
                raise Conflict('Patient already has a queue entry for this schedule.')
            if schedule.available_slots <= 0:
                QUEUE_BOOKINGS_REJECTED.labels(reason='capacity').inc()
                raise CapacityExceeded()

            last = schedule.queues.aggregate(n=Max('queue_number'))['n'] or 0
            claimed = Schedule.objects.filter(pk=schedule.pk, available_slots__gt=0).update(
                booked_slots=F('booked_slots') + 1,
                available_slots=F('available_slots') - 1,
                updated_at=timezone.now(),
            )
            if not claimed:
                QUEUE_BOOKINGS_REJECTED.labels(reason='capacity').inc()
                raise CapacityExceeded()

            queue_number = last + 1
            queue = Queue.objects.create(
                patient=patient,
                doctor_id=schedule.doctor_id,
                polyclinic_id=schedule.polyclinic_id,
                schedule=schedule,
                queue_number=queue_number,
                queue_date=schedule.date,
                appointment_time=schedule.start_time,
                priority=priority or Queue.PRIORITY_NORMAL,
                estimated_wait_time=estimate_wait_minutes(queue_number, priority),
                notes=notes or '',
                complaints=complaints or '',
            )
            QueueTransition.objects.create(
                queue=queue, from_status=None, to_status=Queue.STATUS_WAITING,
                operator=operator, reason='Registered',
            )
            notification = notify_new_appointment(queue)
            self._after_mutation(queue.queue_date)
            transaction.on_commit(lambda: self.push_notification(notification))

        QUEUE_ENTRIES_CREATED.inc()
        logger.info('Queue %s #%s booked on schedule %s', queue.queue_id, queue_number, schedule.schedule_id)
        return queue

    def update_status(self, queue_id: int, new_status: str, operator: Optional[User] = None,
                      reason: str = '') -> Queue:
        with transaction.atomic():
            queue = Queue.objects.select_for_update().filter(pk=queue_id).first()
            if not queue:
                raise NotFound('Queue not found.')
            current = queue.status
            if not can_transition(current, new_status):
                raise InvalidState(f'Cannot change queue status from {current} to {new_status}.')

            if new_status == Queue.STATUS_CANCELLED:
                self._cancel_locked(queue, operator, reason)
            else:
                now = timezone.now()
                if new_status == Queue.STATUS_IN_PROGRESS:
                    queue.called_time = queue.called_time or now
                    queue.start_consultation_time = now
                    queue.actual_wait_time = _minutes_between(queue.registration_time, now)
                elif new_status == Queue.STATUS_COMPLETED:
                    queue.end_consultation_time = now
                    queue.consultation_duration = _minutes_between(queue.start_consultation_time, now)
                queue.status = new_status
                queue.save()
                QueueTransition.objects.create(
                    queue=queue, from_status=current, to_status=new_status,
                    operator=operator, reason=reason or '',
                )
                self._after_mutation(queue.queue_date)

        if new_status == Queue.STATUS_CANCELLED:
            QUEUE_ENTRIES_CANCELLED.inc()
        logger.info('Queue %s moved %s -> %s', queue.queue_id, current, new_status)
        return queue

    def cancel_entry(self, queue_id: int, operator: Optional[User] = None, reason: str = '') -> Queue:
        with transaction.atomic():
            queue = Queue.objects.select_for_update().filter(pk=queue_id).first()
            if not queue:
                raise NotFound('Queue not found.')
            if queue.status in (Queue.STATUS_COMPLETED, Queue.STATUS_CANCELLED):
                raise InvalidState(f'Queue is already {queue.status}, cannot cancel.')
            self._cancel_locked(queue, operator, reason)

        QUEUE_ENTRIES_CANCELLED.inc()
        logger.info('Queue %s cancelled', queue.queue_id)
        return queue

    def _cancel_locked(self, queue: Queue, operator: Optional[User], reason: str) -> None:
        previous = queue.status
        queue.status = Queue.STATUS_CANCELLED
        queue.save(update_fields=['status', 'updated_at'])
        restored = Schedule.objects.filter(pk=queue.schedule_id, booked_slots__gt=0).update(
            booked_slots=F('booked_slots') - 1,
            available_slots=F('available_slots') + 1,
            updated_at=timezone.now(),
        )
        if not restored:
            logger.warning('Schedule %s had no booked slot to release for queue %s',
                           queue.schedule_id, queue.queue_id)
        QueueTransition.objects.create(
            queue=queue, from_status=previous, to_status=Queue.STATUS_CANCELLED,
            operator=operator, reason=reason or 'Cancelled',
        )
        self._after_mutation(queue.queue_date)

    def _after_mutation(self, day: date_cls) -> None:
        transaction.on_commit(lambda: self._committed(day))

    def _committed(self, day: date_cls) -> None:
        cache.delete(stats_cache_key(day))
        self.broadcast()

    def broadcast(self) -> None:
        """Publish today's snapshot; errors are logged and swallowed."""
        if self.notifier is None:
            return
        try:
            self.notifier.publish('queueUpdate', today_snapshot())
        except Exception:
            logger.exception('Queue snapshot broadcast failed')

    def push_notification(self, notification) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish('newNotification', format_notification(notification),
                                  groups=notification_groups(notification))
        except Exception:
            logger.exception('Notification broadcast failed for %s', notification.notification_id)


def get_booking_service() -> BookingService:
    return BookingService(notifier=ChannelsNotifier())
