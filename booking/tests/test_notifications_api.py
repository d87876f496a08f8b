"""
Integration tests for the back-office notification endpoints.
"""
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Notification, Polyclinic, Schedule, User
from ..services.queues import BookingService


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin_user = User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')
        self.staff_user = User.objects.create_user(username='staff1', password='P@ssw0rd1', role='staff')
        self.doctor = User.objects.create_user(username='dr.sari', password='P@ssw0rd1', role='doctor')
        self.patient = User.objects.create_user(username='patient1', password='P@ssw0rd1', role='patient')
        self.polyclinic = Polyclinic.objects.create(name='Poli Umum')
        self.schedule = Schedule.objects.create(
            doctor=self.doctor, polyclinic=self.polyclinic, date=timezone.localdate(),
            start_time='08:00', end_time='12:00', total_slots=5,
        )
        self.queue = BookingService().create_entry(self.patient.id, self.schedule.id)
        self.notification = Notification.objects.get(queue=self.queue)

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_booking_shows_up_for_staff(self):
        response = self.authenticate(self.staff_user).get('/api/v1/notifications')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        [row] = response.data['data']
        self.assertEqual(row['id'], self.notification.id)
        self.assertEqual(row['type'], 'new_appointment')
        self.assertEqual(row['link'], f'/dashboard/queue/{self.queue.id}')

    def test_patients_cannot_read_notifications(self):
        response = self.authenticate(self.patient).get('/api/v1/notifications')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(APIClient().get('/api/v1/notifications').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_mark_read(self):
        client = self.authenticate(self.admin_user)
        response = client.put(f'/api/v1/notifications/{self.notification.id}/read')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['isRead'])
        self.assertEqual(client.get('/api/v1/notifications').data['data'], [])

    def test_mark_read_unknown_is_not_found(self):
        response = self.authenticate(self.admin_user).put('/api/v1/notifications/9999/read')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'not_found')

    def test_doctor_does_not_see_front_desk_notifications(self):
        response = self.authenticate(self.doctor).put(f'/api/v1/notifications/{self.notification.id}/read')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        other = User.objects.create_user(username='patient2', password='P@ssw0rd1', role='patient')
        BookingService().create_entry(other.id, self.schedule.id)

        client = self.authenticate(self.staff_user)
        response = client.put('/api/v1/notifications/mark-all-read')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {'updated': 2})
        self.assertEqual(Notification.objects.filter(is_read=False).count(), 0)

    def test_delete(self):
        client = self.authenticate(self.staff_user)
        response = client.delete(f'/api/v1/notifications/{self.notification.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Notification deleted.')
        self.assertFalse(Notification.objects.exists())

        response = client.delete(f'/api/v1/notifications/{self.notification.id}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
