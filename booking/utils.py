"""Small helpers shared by models, serializers and services."""
from __future__ import annotations

import math
import re
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_uppercase
_TIME_RE = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def _base36(n: int) -> str:
    out = ''
    while n:
        n, r = divmod(n, 36)
        out = _BASE36[r] + out
    return out or '0'


def generate_business_id(prefix: str) -> str:
    """Return a human-readable id such as ``SCHLZ3K9Q1A7F2X``.

    The millisecond timestamp keeps ids roughly sortable by creation time;
    the random suffix separates ids minted in the same millisecond.
    """
    suffix = ''.join(secrets.choice(_BASE36) for _ in range(5))
    return f"{prefix}{_base36(int(time.time() * 1000))}{suffix}"


def normalize_time(value: str) -> str | None:
    """Return ``value`` as zero-padded ``HH:MM`` or ``None`` if malformed."""
    m = _TIME_RE.match((value or '').strip())
    if not m:
        return None
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def status_slug(status: str | None) -> str:
    """``'In Progress'`` -> ``'in-progress'``; empty maps to ``'waiting'``."""
    if not status:
        return 'waiting'
    return re.sub(r'\s+', '-', status.lower())