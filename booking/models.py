"""
Database models for the polyclinic booking backend.

These models capture doctor schedules at a polyclinic and the patient
queue entries booked against them.  A schedule owns a fixed number of
slots; ``booked_slots`` and ``available_slots`` are maintained by the
booking service and guarded by database constraints so that the two
counters always add up to ``total_slots``.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from .utils import generate_business_id


class User(AbstractUser):
    """Custom user model with a role.

    Staff accounts (administrators, doctors, front-desk staff) and
    patients share one table; the ``role`` field drives permissions.
    """
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_STAFF = 'staff'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Admin'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_PATIENT, 'Patient'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    # Only meaningful for doctors
    specialization = models.CharField(max_length=100, blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Polyclinic(models.Model):
    """An outpatient clinic (department) where doctors hold schedules."""
    DEPARTMENT_CHOICES = [(d, d) for d in (
        'Umum', 'Spesialis', 'Gigi', 'Mata', 'THT', 'Kulit', 'Jantung', 'Paru',
        'Saraf', 'Bedah', 'Kandungan', 'Anak', 'Psikiatri', 'Gizi', 'Rehabilitasi',
    )]
    STATUS_ACTIVE = 'Active'
    STATUS_MAINTENANCE = 'Maintenance'
    STATUS_CLOSED = 'Closed'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_MAINTENANCE, 'Maintenance'),
        (STATUS_CLOSED, 'Closed'),
    ]
    polyclinic_id = models.CharField(max_length=32, unique=True, editable=False)
    name = models.CharField(max_length=255)
    department = models.CharField(max_length=32, choices=DEPARTMENT_CHOICES, default='Umum')
    description = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        if not self.polyclinic_id:
            self.polyclinic_id = generate_business_id('POL')
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.polyclinic_id})"


class Schedule(models.Model):
    """A bookable block of slots for one doctor at one polyclinic on one date."""
    STATUS_ACTIVE = 'Active'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    schedule_id = models.CharField(max_length=32, unique=True, editable=False)
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='schedules')
    polyclinic = models.ForeignKey(Polyclinic, on_delete=models.PROTECT, related_name='schedules')
    date = models.DateField(db_index=True)
    # Wall-clock "HH:MM" strings, zero padded so they compare lexicographically
    start_time = models.CharField(max_length=5)
    end_time = models.CharField(max_length=5)
    total_slots = models.PositiveIntegerField(default=20)
    booked_slots = models.PositiveIntegerField(default=0)
    available_slots = models.IntegerField(default=20)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='schedules_created'
    )
    updated_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='schedules_updated'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date'], name='booking_sch_doctor__3f0c1a_idx'),
            models.Index(fields=['polyclinic', 'date'], name='booking_sch_polycli_8b7d2e_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(booked_slots__lte=F('total_slots')),
                name='schedule_booked_within_total',
            ),
            models.CheckConstraint(
                condition=Q(available_slots=F('total_slots') - F('booked_slots')),
                name='schedule_available_matches_counters',
            ),
        ]

    def save(self, *args, **kwargs):
        if not self.schedule_id:
            self.schedule_id = generate_business_id('SCH')
        self.available_slots = self.total_slots - self.booked_slots
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.schedule_id} {self.date:%Y-%m-%d} {self.start_time}-{self.end_time}"


class Queue(models.Model):
    """A single patient's claim against a schedule's capacity."""
    STATUS_WAITING = 'Waiting'
    STATUS_IN_PROGRESS = 'In Progress'
    STATUS_COMPLETED = 'Completed'
    STATUS_CANCELLED = 'Cancelled'
    STATUS_NO_SHOW = 'No Show'
    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No Show'),
    ]
    PRIORITY_NORMAL = 'Normal'
    PRIORITY_URGENT = 'Urgent'
    PRIORITY_EMERGENCY = 'Emergency'
    PRIORITY_CHOICES = [
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_URGENT, 'Urgent'),
        (PRIORITY_EMERGENCY, 'Emergency'),
    ]

    queue_id = models.CharField(max_length=32, unique=True, editable=False)
    patient = models.ForeignKey(User, on_delete=models.PROTECT, related_name='queue_entries')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='doctor_queue_entries')
    polyclinic = models.ForeignKey(Polyclinic, on_delete=models.PROTECT, related_name='queue_entries')
    schedule = models.ForeignKey(Schedule, on_delete=models.PROTECT, related_name='queues')
    queue_number = models.PositiveIntegerField()
    queue_date = models.DateField(db_index=True)
    appointment_time = models.CharField(max_length=5, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL)
    registration_time = models.DateTimeField(default=timezone.now)
    called_time = models.DateTimeField(null=True, blank=True)
    start_consultation_time = models.DateTimeField(null=True, blank=True)
    end_consultation_time = models.DateTimeField(null=True, blank=True)
    # Minutes
    estimated_wait_time = models.PositiveIntegerField(null=True, blank=True)
    actual_wait_time = models.PositiveIntegerField(null=True, blank=True)
    consultation_duration = models.PositiveIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    complaints = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['queue_date', 'status'], name='booking_que_queue_d_5a9e41_idx'),
            models.Index(fields=['polyclinic', 'queue_date'], name='booking_que_polycli_c2d7f0_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['schedule', 'queue_number'], name='queue_number_unique_per_schedule'),
        ]

    def save(self, *args, **kwargs):
        if not self.queue_id:
            self.queue_id = generate_business_id('QUE')
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"#{self.queue_number} on {self.schedule_id} ({self.status})"


class QueueTransition(models.Model):
    """Records a status transition for a queue entry."""
    queue = models.ForeignKey(Queue, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=16, null=True, blank=True)
    to_status = models.CharField(max_length=16)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_transitions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.queue_id}: {self.from_status} → {self.to_status}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='booking_aud_action_7e21b3_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='booking_aud_object__9d4c60_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"


class Notification(models.Model):
    """A back-office notice addressed to roles (``admin``, ``staff``) rather than users."""
    TYPE_NEW_APPOINTMENT = 'new_appointment'
    TYPE_SCHEDULE_UPDATE = 'schedule_update'
    TYPE_SYSTEM_ALERT = 'system_alert'
    TYPE_CHOICES = [
        (TYPE_NEW_APPOINTMENT, 'New appointment'),
        (TYPE_SCHEDULE_UPDATE, 'Schedule update'),
        (TYPE_SYSTEM_ALERT, 'System alert'),
    ]

    notification_id = models.CharField(max_length=32, unique=True, editable=False)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True)
    target_roles = models.JSONField(default=list, blank=True)
    queue = models.ForeignKey(
        Queue, null=True, blank=True, on_delete=models.SET_NULL, related_name='notifications'
    )
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['is_read', 'created_at'], name='booking_not_is_read_4b7e12_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self.notification_id:
            self.notification_id = generate_business_id('NOT')
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.type} -> {','.join(self.target_roles or [])}"
