"""
Business errors raised by the booking services and the API exception
handler that renders every failure in the ``{success, message}`` envelope.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for business-rule violations.

    Services raise these; the HTTP layer maps ``status_code`` and ``code``
    onto the response without any per-view handling.
    """
    status_code = 400
    code = 'booking_error'
    default_message = 'Request could not be processed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(BookingError):
    status_code = 404
    code = 'not_found'
    default_message = 'Resource not found.'


class InvalidArgument(BookingError):
    status_code = 400
    code = 'invalid_argument'
    default_message = 'Invalid argument.'


class Conflict(BookingError):
    status_code = 409
    code = 'conflict'
    default_message = 'Request conflicts with existing data.'


class CapacityExceeded(BookingError):
    status_code = 409
    code = 'capacity_exceeded'
    default_message = 'No slots are available for this schedule.'


class InvalidState(BookingError):
    status_code = 409
    code = 'invalid_state'
    default_message = 'Operation not allowed in the current state.'


def _flatten_errors(detail, field: str | None = None) -> list[dict]:
    """Turn DRF's nested validation detail into ``[{field, message}]``."""
    if isinstance(detail, dict):
        out: list[dict] = []
        for key, value in detail.items():
            name = key if field is None else f"{field}.{key}"
            out.extend(_flatten_errors(value, name))
        return out
    if isinstance(detail, (list, tuple)):
        out = []
        for item in detail:
            out.extend(_flatten_errors(item, field))
        return out
    return [{'field': field or 'non_field_errors', 'message': str(detail)}]


def api_exception_handler(exc, context):
    if isinstance(exc, BookingError):
        return Response(
            {'success': False, 'code': exc.code, 'message': exc.message},
            status=exc.status_code,
        )

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.error('Unhandled error in %s', getattr(view, '__name__', view), exc_info=exc)
        return Response(
            {'success': False, 'code': 'internal_error', 'message': 'Internal server error.'},
            status=500,
        )

    if isinstance(exc, drf_exceptions.ValidationError):
        resp.data = {
            'success': False,
            'code': 'invalid_argument',
            'message': 'Invalid request data.',
            'errors': _flatten_errors(exc.detail),
        }
        return resp

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, dict):
        detail = detail.get('detail') or detail
    resp.data = {
        'success': False,
        'code': getattr(exc, 'default_code', 'api_error'),
        'message': str(detail) if detail is not None else str(exc),
    }
    return resp
