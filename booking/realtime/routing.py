from django.urls import path

from .consumers import NotificationsConsumer, QueueUpdatesConsumer

websocket_urlpatterns = [
    path("ws/queues/", QueueUpdatesConsumer.as_asgi()),
    path("ws/notifications/", NotificationsConsumer.as_asgi()),
]
