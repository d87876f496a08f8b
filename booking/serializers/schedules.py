import bleach
from rest_framework import serializers

from ..models import Schedule
from ..utils import normalize_time


class _TimeField(serializers.CharField):
    """``HH:MM`` (24h); normalised to zero-padded form."""

    def to_internal_value(self, data):
        value = normalize_time(super().to_internal_value(data))
        if value is None:
            raise serializers.ValidationError('Invalid time format (HH:MM).')
        return value


def _clean_notes(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class ScheduleCreateSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    polyclinicId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    startTime = _TimeField()
    endTime = _TimeField()
    totalSlots = serializers.IntegerField(min_value=1, max_value=100)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    status = serializers.ChoiceField(choices=[c for c, _ in Schedule.STATUS_CHOICES], required=False)

    def validate_notes(self, v):
        return _clean_notes(v)

    def validate(self, attrs):
        if attrs['startTime'] >= attrs['endTime']:
            raise serializers.ValidationError({'endTime': 'End time must be after start time.'})
        return attrs


class ScheduleUpdateSerializer(serializers.Serializer):
    polyclinicId = serializers.IntegerField(min_value=1, required=False)
    date = serializers.DateField(required=False)
    startTime = _TimeField(required=False)
    endTime = _TimeField(required=False)
    totalSlots = serializers.IntegerField(min_value=1, max_value=100, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    status = serializers.ChoiceField(choices=[c for c, _ in Schedule.STATUS_CHOICES], required=False)

    def validate_notes(self, v):
        return _clean_notes(v)


class ScheduleListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)
    doctorId = serializers.IntegerField(required=False, min_value=1)
    polyclinicId = serializers.IntegerField(required=False, min_value=1)
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Schedule.STATUS_CHOICES], required=False)


class AvailableSlotsQuerySerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
