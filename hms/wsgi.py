"""
WSGI config for the hms project.

Exposes the WSGI callable as a module-level variable named ``application``.
Plain HTTP only; WebSocket queue updates need the ASGI entrypoint in
``hms.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hms.settings')

application = get_wsgi_application()
