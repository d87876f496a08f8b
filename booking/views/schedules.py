"""
Schedule endpoints.

Any authenticated user may browse schedules and look up free slots;
creating, editing and cancelling schedules is reserved for
administrators.  Business rules live in ``booking.services.schedules``;
these views only validate input and shape the response envelope.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsAdminRole, IsAdminRoleOrReadOnly
from ..responses import envelope, paginate_meta
from ..serializers.schedules import (
    AvailableSlotsQuerySerializer,
    ScheduleCreateSerializer,
    ScheduleListQuerySerializer,
    ScheduleUpdateSerializer,
)
from ..services import schedules as schedule_service

# request field -> service patch key
_PATCH_FIELDS = {
    'polyclinicId': 'polyclinic_id',
    'date': 'date',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'totalSlots': 'total_slots',
    'notes': 'notes',
    'status': 'status',
}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRoleOrReadOnly])
def schedules(request):
    if request.method == 'POST':
        s = ScheduleCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        schedule = schedule_service.create_schedule(
            doctor_id=vd['doctorId'],
            polyclinic_id=vd['polyclinicId'],
            date=vd['date'],
            start_time=vd['startTime'],
            end_time=vd['endTime'],
            total_slots=vd['totalSlots'],
            notes=vd.get('notes', ''),
            status=vd.get('status'),
            user=request.user,
        )
        return envelope(schedule_service.format_schedule(schedule), 'Schedule created.', status=201)

    q = ScheduleListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    data, total = schedule_service.list_schedules(
        doctor_id=vd.get('doctorId'),
        polyclinic_id=vd.get('polyclinicId'),
        date=vd.get('date'),
        status=vd.get('status'),
        page=vd['page'],
        limit=vd['limit'],
    )
    return envelope(data, pagination=paginate_meta(vd['page'], vd['limit'], total))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRoleOrReadOnly])
def schedule_detail(request, schedule_id: int):
    if request.method == 'GET':
        return envelope(schedule_service.schedule_detail(schedule_id))

    if request.method == 'DELETE':
        schedule = schedule_service.cancel_schedule(schedule_id, user=request.user)
        return envelope(schedule_service.format_schedule(schedule), 'Schedule cancelled.')

    s = ScheduleUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patch = {_PATCH_FIELDS[k]: v for k, v in s.validated_data.items()}
    schedule = schedule_service.update_schedule(schedule_id, patch, user=request.user)
    return envelope(schedule_service.format_schedule(schedule), 'Schedule updated.')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_slots(request):
    """Active schedules of one doctor on one date that still have free slots."""
    q = AvailableSlotsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = schedule_service.available_schedules(q.validated_data['doctorId'], q.validated_data['date'])
    return envelope(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def schedule_stats(request):
    return envelope(schedule_service.schedule_stats())
