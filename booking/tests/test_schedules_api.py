"""
Integration tests for the schedule endpoints.

Exercises role gating, request validation, the response envelope and
the business-rule error mapping through DRF's ``APIClient``.
"""
from datetime import timedelta

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Polyclinic, Queue, Schedule, User
from ..services.queues import BookingService


class ScheduleAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin_user = User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')
        self.doctor = User.objects.create_user(
            username='dr.sari', password='P@ssw0rd1', role='doctor', first_name='Sari', last_name='Wijaya',
        )
        self.patient = User.objects.create_user(username='patient1', password='P@ssw0rd1', role='patient')
        self.polyclinic = Polyclinic.objects.create(name='Poli Umum')
        self.today = timezone.localdate()
        self.schedule = Schedule.objects.create(
            doctor=self.doctor, polyclinic=self.polyclinic, date=self.today,
            start_time='08:00', end_time='12:00', total_slots=20,
        )

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def payload(self, **overrides) -> dict:
        data = {
            'doctorId': self.doctor.id,
            'polyclinicId': self.polyclinic.id,
            'date': (self.today + timedelta(days=1)).isoformat(),
            'startTime': '8:00',
            'endTime': '12:30',
            'totalSlots': 15,
            'notes': '<b>Bring</b> referral letter',
        }
        data.update(overrides)
        return data

    def test_requires_authentication(self):
        response = APIClient().get('/api/v1/schedules')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_admin_creates_schedule(self):
        client = self.authenticate(self.admin_user)
        response = client.post('/api/v1/schedules', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        data = response.data['data']
        self.assertEqual(data['startTime'], '08:00')
        self.assertEqual(data['availableSlots'], 15)
        self.assertEqual(data['bookedSlots'], 0)
        self.assertEqual(data['notes'], 'Bring referral letter')
        self.assertEqual(data['doctor']['name'], 'Sari Wijaya')

    def test_patient_cannot_create_schedule(self):
        client = self.authenticate(self.patient)
        response = client.post('/api/v1/schedules', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Schedule.objects.count(), 1)

    def test_validation_errors_are_listed_per_field(self):
        client = self.authenticate(self.admin_user)
        response = client.post(
            '/api/v1/schedules',
            self.payload(startTime='25:00', totalSlots=0),
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_argument')
        fields = {e['field'] for e in response.data['errors']}
        self.assertEqual(fields, {'startTime', 'totalSlots'})

    def test_end_before_start_is_rejected(self):
        client = self.authenticate(self.admin_user)
        response = client.post('/api/v1/schedules', self.payload(startTime='13:00'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['field'], 'endTime')

    def test_overlap_returns_conflict(self):
        client = self.authenticate(self.admin_user)
        response = client.post(
            '/api/v1/schedules',
            self.payload(date=self.today.isoformat(), startTime='11:00', endTime='14:00'),
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'conflict')

    def test_list_is_paginated(self):
        for hour in range(13, 16):
            Schedule.objects.create(
                doctor=self.doctor, polyclinic=self.polyclinic, date=self.today,
                start_time=f'{hour}:00', end_time=f'{hour}:45', total_slots=5,
            )
        client = self.authenticate(self.patient)
        response = client.get('/api/v1/schedules', {'page': 2, 'limit': 3})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination'], {'currentPage': 2, 'totalPages': 2, 'total': 4})
        self.assertEqual(len(response.data['data']), 1)

    def test_detail_includes_queue_list(self):
        BookingService().create_entry(self.patient.id, self.schedule.id)
        client = self.authenticate(self.patient)
        response = client.get(f'/api/v1/schedules/{self.schedule.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['queues']), 1)
        self.assertEqual(response.data['data']['queues'][0]['status'], Queue.STATUS_WAITING)

    def test_unknown_schedule_is_not_found(self):
        client = self.authenticate(self.patient)
        response = client.get('/api/v1/schedules/999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'success': False, 'code': 'not_found', 'message': 'Schedule not found.'})

    def test_update_rejects_total_below_booked(self):
        Schedule.objects.filter(pk=self.schedule.pk).update(booked_slots=10, available_slots=10)
        client = self.authenticate(self.admin_user)
        response = client.put(f'/api/v1/schedules/{self.schedule.id}', {'totalSlots': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.schedule.refresh_from_db()
        self.assertEqual((self.schedule.total_slots, self.schedule.available_slots), (20, 10))

    def test_update_total_slots(self):
        client = self.authenticate(self.admin_user)
        response = client.put(f'/api/v1/schedules/{self.schedule.id}', {'totalSlots': 25}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['availableSlots'], 25)

    def test_delete_soft_cancels_unbooked_schedule(self):
        client = self.authenticate(self.admin_user)
        response = client.delete(f'/api/v1/schedules/{self.schedule.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.schedule.refresh_from_db()
        self.assertEqual(self.schedule.status, Schedule.STATUS_CANCELLED)

    def test_delete_booked_schedule_conflicts(self):
        BookingService().create_entry(self.patient.id, self.schedule.id)
        client = self.authenticate(self.admin_user)
        response = client.delete(f'/api/v1/schedules/{self.schedule.id}')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.schedule.refresh_from_db()
        self.assertEqual(self.schedule.status, Schedule.STATUS_ACTIVE)

    def test_available_slots(self):
        client = self.authenticate(self.patient)
        response = client.get('/api/v1/schedules/available-slots',
                              {'doctorId': self.doctor.id, 'date': self.today.isoformat()})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['id'] for s in response.data['data']], [self.schedule.id])

        response = client.get('/api/v1/schedules/available-slots')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats_are_admin_only(self):
        self.assertEqual(self.authenticate(self.patient).get('/api/v1/schedules/stats').status_code, 403)
        response = self.authenticate(self.admin_user).get('/api/v1/schedules/stats')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['active'], 1)
