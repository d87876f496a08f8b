"""Success envelope shared by every API view."""
from __future__ import annotations

from rest_framework.response import Response

from .utils import total_pages


def envelope(data=None, message: str | None = None, pagination: dict | None = None, status: int = 200) -> Response:
    body: dict = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    if pagination is not None:
        body['pagination'] = pagination
    return Response(body, status=status)


def paginate_meta(page: int, limit: int, total: int) -> dict:
    return {'currentPage': page, 'totalPages': total_pages(total, limit), 'total': total}
