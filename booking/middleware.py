import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Tag each request with an ``X-Request-ID`` and log its outcome."""
    HEADER = 'HTTP_X_REQUEST_ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get(self.HEADER) or uuid.uuid4().hex
        request.request_id = request_id
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000
        response['X-Request-ID'] = request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            '%s %s -> %s (%.1f ms) rid=%s',
            request.method, request.path, response.status_code, duration_ms, request_id,
        )
        return response
