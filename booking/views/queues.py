"""
Queue endpoints.

Patients book and cancel their own entries; doctors, staff and
administrators can book on a patient's behalf and move entries through
the consultation workflow.  All capacity bookkeeping happens in
``BookingService``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.throttling import UserRateThrottle

from ..exceptions import InvalidArgument, NotFound
from ..models import Queue, User
from ..permissions import CLINICAL_ROLES, IsClinicalRole, IsQueueOwnerOrClinical, has_role
from ..responses import envelope
from ..serializers.queues import QueueCreateSerializer, QueueStatusSerializer
from ..services.queues import format_queue, get_booking_service, queue_stats, today_snapshot, today_summary
from ..throttling import BookingRateThrottle


def _get_owned_queue(request, queue_id: int) -> Queue:
    queue = Queue.objects.select_related('patient', 'doctor', 'polyclinic').filter(pk=queue_id).first()
    if not queue:
        raise NotFound('Queue not found.')
    if not IsQueueOwnerOrClinical().has_object_permission(request, None, queue):
        raise PermissionDenied('You can only access your own queue entries.')
    return queue


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([UserRateThrottle, BookingRateThrottle])
def queues(request):
    if request.method == 'GET':
        return envelope(today_snapshot())

    s = QueueCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user: User = request.user  # type: ignore[assignment]

    if has_role(user, CLINICAL_ROLES):
        patient_id = vd.get('patientId')
        if not patient_id:
            raise InvalidArgument('patientId is required when booking for a patient.')
    else:
        patient_id = vd.get('patientId') or user.id
        if patient_id != user.id:
            raise PermissionDenied('Patients can only book for themselves.')

    queue = get_booking_service().create_entry(
        patient_id=patient_id,
        schedule_id=vd['scheduleId'],
        notes=vd.get('notes'),
        complaints=vd.get('complaints'),
        priority=vd.get('priority') or Queue.PRIORITY_NORMAL,
        operator=user,
    )
    return envelope(format_queue(queue), 'Queue entry created.', status=201)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def queue_detail(request, queue_id: int):
    queue = _get_owned_queue(request, queue_id)
    if request.method == 'GET':
        return envelope(format_queue(queue, with_history=True))

    reason = (request.data or {}).get('reason') or ''
    queue = get_booking_service().cancel_entry(queue.id, operator=request.user, reason=reason)
    return envelope(format_queue(queue), 'Queue entry cancelled.')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def queue_update_status(request, queue_id: int):
    s = QueueStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    queue = get_booking_service().update_status(
        queue_id,
        s.validated_data['status'],
        operator=request.user,
        reason=s.validated_data.get('reason', ''),
    )
    return envelope(format_queue(queue), f'Queue status updated to {queue.status}.')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_statistics(request):
    return envelope(queue_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_summary(request):
    """Today's entries per polyclinic, busiest first."""
    return envelope(today_summary())
