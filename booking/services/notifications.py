"""
Back-office notifications.

A notification is addressed to roles, not to individual users: every
administrator or front-desk user sees it until one of them marks it
read.  Bookings create one inside their transaction; pushing it to the
``<role>_notifications`` sockets is left to the caller's notifier.
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Iterable, Iterator, Optional

from django.utils import timezone

from booking.exceptions import NotFound
from booking.models import Notification, Queue, User
from booking.permissions import notification_roles
from booking.realtime.notifier import notification_group
from booking.services.audit import log_action

logger = logging.getLogger(__name__)

UNREAD_LIMIT = 20
APPOINTMENT_ROLES = ['admin', 'staff']


def format_notification(n: Notification) -> dict:
    return {
        'id': n.id,
        'notificationId': n.notification_id,
        'type': n.type,
        'message': n.message,
        'link': n.link,
        'targetRoles': list(n.target_roles or []),
        'queueId': n.queue_id,
        'isRead': n.is_read,
        'readAt': n.read_at.isoformat() if n.read_at else None,
        'createdAt': n.created_at.isoformat() if n.created_at else None,
    }


def notification_groups(n: Notification) -> list[str]:
    return [notification_group(role) for role in n.target_roles or []]


def create_notification(*, type: str, message: str, target_roles: Iterable[str],
                        queue: Optional[Queue] = None, link: str = '') -> Notification:
    n = Notification.objects.create(
        type=type, message=message, target_roles=list(target_roles), queue=queue, link=link,
    )
    logger.info('Notification %s (%s) for %s', n.notification_id, type, ','.join(n.target_roles))
    return n


def notify_new_appointment(queue: Queue) -> Notification:
    message = (
        f"New patient ({queue.patient.display_name}) with queue number {queue.queue_number} "
        f"booked {queue.doctor.display_name} at {queue.polyclinic.name} "
        f"on {queue.queue_date:%d %B %Y} at {queue.appointment_time}."
    )
    return create_notification(
        type=Notification.TYPE_NEW_APPOINTMENT,
        message=message,
        target_roles=APPOINTMENT_ROLES,
        queue=queue,
        link=f'/dashboard/queue/{queue.id}',
    )


def _visible(user: User, qs) -> Iterator[Notification]:
    roles = notification_roles(user)
    if not roles:
        return
    # Role matching happens here; JSON containment lookups are not available on SQLite
    for n in qs.iterator():
        if roles.intersection(n.target_roles or ()):
            yield n


def _get_visible(notification_id: int, user: User) -> Notification:
    n = Notification.objects.filter(pk=notification_id).first()
    if not n or not notification_roles(user).intersection(n.target_roles or ()):
        raise NotFound('Notification not found.')
    return n


def list_unread(user: User, limit: int = UNREAD_LIMIT) -> list[dict]:
    """Newest unread notifications addressed to any of the user's roles."""
    qs = Notification.objects.filter(is_read=False).order_by('-created_at', '-id')
    return [format_notification(n) for n in islice(_visible(user, qs), limit)]


def mark_read(notification_id: int, user: User) -> Notification:
    n = _get_visible(notification_id, user)
    if not n.is_read:
        n.is_read = True
        n.read_at = timezone.now()
        n.save(update_fields=['is_read', 'read_at'])
    return n


def mark_all_read(user: User) -> int:
    ids = [n.pk for n in _visible(user, Notification.objects.filter(is_read=False))]
    if not ids:
        return 0
    return Notification.objects.filter(pk__in=ids, is_read=False).update(is_read=True, read_at=timezone.now())


def delete_notification(notification_id: int, user: User) -> None:
    n = _get_visible(notification_id, user)
    n.delete()
    log_action(user=user, action='notification_delete', object_type='notification', object_id=notification_id,
               detail={'notificationId': n.notification_id})
