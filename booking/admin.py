"""
Django admin registrations for the booking models.

Polyclinics and user accounts have no API of their own, so the admin is
where they are maintained.  Schedule counters are shown read-only; they
only move through the booking service.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditEvent, Notification, Polyclinic, Queue, QueueTransition, Schedule, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'role', 'specialization', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'phone')
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Role', {'fields': ('role', 'phone', 'specialization')}),
    )


@admin.register(Polyclinic)
class PolyclinicAdmin(admin.ModelAdmin):
    list_display = ('polyclinic_id', 'name', 'department', 'status', 'created_at')
    list_filter = ('department', 'status')
    search_fields = ('polyclinic_id', 'name')


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ('schedule_id', 'doctor', 'polyclinic', 'date', 'start_time', 'end_time',
                    'total_slots', 'booked_slots', 'available_slots', 'status')
    list_filter = ('status', 'polyclinic', 'date')
    search_fields = ('schedule_id', 'doctor__username', 'doctor__first_name')
    readonly_fields = ('schedule_id', 'booked_slots', 'available_slots', 'created_at', 'updated_at')


class QueueTransitionInline(admin.TabularInline):
    model = QueueTransition
    extra = 0
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')
    can_delete = False


@admin.register(Queue)
class QueueAdmin(admin.ModelAdmin):
    list_display = ('queue_id', 'queue_number', 'patient', 'doctor', 'polyclinic', 'queue_date', 'status', 'priority')
    list_filter = ('status', 'priority', 'queue_date', 'polyclinic')
    search_fields = ('queue_id', 'patient__username', 'patient__first_name')
    readonly_fields = ('queue_id', 'queue_number', 'schedule', 'status')
    inlines = [QueueTransitionInline]


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('user__username', 'action')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('notification_id', 'type', 'target_roles', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
    search_fields = ('notification_id', 'message')
    readonly_fields = ('notification_id', 'queue', 'read_at', 'created_at')
