import bleach
from rest_framework import serializers

from ..models import Queue


class QueueCreateSerializer(serializers.Serializer):
    scheduleId = serializers.IntegerField(min_value=1)
    patientId = serializers.IntegerField(min_value=1, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)
    complaints = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    priority = serializers.ChoiceField(choices=[c for c, _ in Queue.PRIORITY_CHOICES], required=False)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)

    def validate_complaints(self, v):
        return bleach.clean((v or '').strip(), tags=set(), strip=True)


class QueueStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Queue.STATUS_CHOICES])
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
