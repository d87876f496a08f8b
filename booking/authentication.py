"""
Authentication backend for bearer tokens.

This subclass of simplejwt's ``JWTAuthentication`` gives the project a
stable import path for ``REST_FRAMEWORK['DEFAULT_AUTHENTICATION_CLASSES']``
and keeps the view modules free of authentication imports.  The header
keyword (``Bearer``) comes from ``SIMPLE_JWT['AUTH_HEADER_TYPES']``.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerJWTAuthentication(JWTAuthentication):
    """``Authorization: Bearer <access token>``; inactive users are rejected."""
