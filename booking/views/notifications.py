"""
Notification endpoints for the back office.

Every route is scoped to the caller's roles: a notification addressed
to other roles is reported as not found.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsClinicalRole
from ..responses import envelope
from ..services.notifications import (
    delete_notification,
    format_notification,
    list_unread,
    mark_all_read,
    mark_read,
)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def notifications(request):
    return envelope(list_unread(request.user))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def notification_read(request, notification_id: int):
    n = mark_read(notification_id, request.user)
    return envelope(format_notification(n), 'Notification marked as read.')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def notifications_mark_all_read(request):
    updated = mark_all_read(request.user)
    return envelope({'updated': updated}, 'All notifications marked as read.')


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def notification_detail(request, notification_id: int):
    delete_notification(notification_id, request.user)
    return envelope(message='Notification deleted.')
