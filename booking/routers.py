"""
URL mappings for the booking API.

Everything is served under ``/api/v1`` without trailing slashes
(``APPEND_SLASH`` is off).  Fixed paths such as ``schedules/stats`` are
listed before the ``<int:...>`` detail routes.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view
from .views import health
from .views.notifications import notification_detail, notification_read, notifications, notifications_mark_all_read
from .views.queues import queue_detail, queue_statistics, queue_summary, queue_update_status, queues
from .views.schedules import available_slots, schedule_detail, schedule_stats, schedules

api_v1 = [
    # Auth
    path('auth/login', login_view, name='login_view'),
    path('auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('auth/logout', jwt_logout_view, name='jwt_logout_view'),

    # Schedules
    path('schedules', schedules, name='schedules'),
    path('schedules/available-slots', available_slots, name='available_slots'),
    path('schedules/stats', schedule_stats, name='schedule_stats'),
    path('schedules/<int:schedule_id>', schedule_detail, name='schedule_detail'),

    # Queues
    path('queues', queues, name='queues'),
    path('queues/stats', queue_statistics, name='queue_stats'),
    path('queues/summary', queue_summary, name='queue_summary'),
    path('queues/<int:queue_id>', queue_detail, name='queue_detail'),
    path('queues/<int:queue_id>/status', queue_update_status, name='queue_update_status'),

    # Notifications
    path('notifications', notifications, name='notifications'),
    path('notifications/mark-all-read', notifications_mark_all_read, name='notifications_mark_all_read'),
    path('notifications/<int:notification_id>', notification_detail, name='notification_detail'),
    path('notifications/<int:notification_id>/read', notification_read, name='notification_read'),
]

urlpatterns = [
    path('api/v1/', include(api_v1)),
    path('healthz', health.healthz, name='healthz'),
    path('', include('django_prometheus.urls')),
]
